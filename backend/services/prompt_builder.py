"""All prompt templates for Gemini API calls."""

import json

from models.schemas.cv_document import CVDocument
from models.schemas.recommendation import FocusedRecommendation

ANALYSIS_SYSTEM = (
    "You are an expert CV analyst. Provide extremely detailed, specific analysis with "
    "exact quotes and corrections in valid JSON format only. No additional text outside "
    "the JSON. Always quote actual text from the CV, never make up examples."
)

ENHANCEMENT_SYSTEM = """You are a JSON-only CV enhancement API. You MUST respond with valid JSON only.

CRITICAL RULES:
1. Your response must be ONLY a JSON object
2. Start with { and end with }
3. No explanations, no markdown, no code blocks, no text outside JSON
4. Enhance EXISTING content only - do not add new sections
5. Preserve the exact JSON structure provided
6. Use proper JSON escaping for all strings

ENHANCEMENT REQUIREMENTS:
- Rewrite the professional summary into a substantially richer paragraph
- Expand every experience description with concrete achievements, action verbs and metrics
- Add relevant skills implied by the existing experience
- Improve grammar and sentence structure throughout

FORBIDDEN:
- Adding new sections or fields
- Creating new experiences/education entries
- Adding certifications that don't exist
- Changing JSON structure
- Any text outside the JSON object"""

RECOMMENDATIONS_SYSTEM = """You are an expert CV optimization assistant. Parse the provided AI recommendations report and extract individual actionable recommendations.

Return a JSON array of recommendations, each with:
- section: The CV section this applies to (Personal Info, Experience, Education, Skills, etc.)
- recommendation: Clear description of what to improve
- impact: Expected impact level (High, Medium, Low)
- type: Type of improvement (keyword, grammar, structure, quantification, etc.)

Only extract clear, actionable recommendations. Ignore general advice or explanatory text.

Example format:
[
  {
    "section": "Experience",
    "recommendation": "Add quantifiable metrics to Senior Sales Manager role - include revenue figures and team size",
    "impact": "High",
    "type": "quantification"
  }
]"""


def build_analysis_prompt(
    cv_text: str,
    job_description: str | None = None,
    industry: str = "technology",
    analysis_types: list[str] | None = None,
) -> str:
    """Detailed ATS / content-quality / length / industry-fit analysis."""
    jd_section = f"\nJOB DESCRIPTION: {job_description}\n" if job_description else ""
    focus_section = (
        f"FOCUS AREAS: {', '.join(analysis_types)}\n" if analysis_types else ""
    )

    return f"""You are an expert CV/Resume analyst and ATS specialist. Analyze the following CV and provide EXTREMELY DETAILED feedback with SPECIFIC EXAMPLES.

CV CONTENT:
{cv_text}
{jd_section}
INDUSTRY: {industry}
{focus_section}
CRITICAL INSTRUCTIONS:
1. For grammar issues: Quote the EXACT text with the error and provide the EXACT correction
2. For weak verbs: Quote the EXACT sentence and provide the EXACT replacement sentence
3. For keywords: List the EXACT words found and EXACT words missing
4. For quantification: Quote the EXACT sentence that needs metrics and suggest SPECIFIC numbers/percentages
5. Be extremely specific - no generic advice

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "atsScore": {{
    "overall": <number 0-100>,
    "breakdown": {{
      "formatting": <number 0-100>,
      "keywords": <number 0-100>,
      "structure": <number 0-100>,
      "readability": <number 0-100>,
      "fileFormat": <number 0-100>
    }},
    "recommendations": ["<specific ATS improvement with exact changes needed>"],
    "passRate": "<High|Medium|Low>"
  }},
  "contentQuality": {{
    "overall": <number 0-100>,
    "grammar": {{
      "score": <number 0-100>,
      "issues": [
        {{
          "type": "grammar|spelling|punctuation",
          "originalText": "<EXACT text from CV with the error>",
          "correctedText": "<EXACT corrected version>",
          "message": "<specific description of the error>",
          "suggestion": "<exact fix to apply>",
          "severity": "high|medium|low",
          "location": "<section>"
        }}
      ]
    }},
    "impact": {{
      "score": <number 0-100>,
      "weakVerbs": [
        {{"verb": "<weak verb>", "originalSentence": "<EXACT sentence>", "improvedSentence": "<EXACT improved sentence>", "location": "<section>"}}
      ],
      "missingQuantification": [
        {{"originalText": "<EXACT text>", "suggestedText": "<text with specific metrics>", "location": "<section>", "metricType": "percentage|number|timeframe|currency"}}
      ],
      "passiveVoiceCount": <number>,
      "passiveVoiceExamples": [
        {{"originalText": "<EXACT passive sentence>", "improvedText": "<active version>", "location": "<section>"}}
      ]
    }},
    "clarity": {{
      "score": <number 0-100>,
      "avgSentenceLength": <number>,
      "readabilityScore": <number>,
      "improvementSuggestions": [
        {{"issue": "<clarity issue>", "originalText": "<EXACT text>", "improvedText": "<improved version>", "location": "<section>"}}
      ]
    }}
  }},
  "lengthAnalysis": {{
    "wordCount": <number>,
    "pageEstimate": <number>,
    "recommendation": "<specific length recommendation>",
    "isOptimal": <boolean>,
    "sectionsAnalysis": {{
      "tooLong": ["<sections that are too verbose>"],
      "tooShort": ["<sections that need more detail>"],
      "suggestions": ["<specific suggestion per section>"]
    }}
  }},
  "industryFit": {{
    "score": <number 0-100>,
    "matchedKeywords": [
      {{"keyword": "<keyword found>", "context": "<sentence where it appears>", "relevance": "<why it matters>"}}
    ],
    "missingKeywords": [
      {{"keyword": "<missing keyword>", "importance": "<why it is critical>", "suggestedPlacement": "<where to add it>", "exampleUsage": "<sentence using it>"}}
    ],
    "recommendations": ["<specific industry improvement with exact keywords to add>"]
  }}
}}

Quote actual sentences from the CV, don't make up examples."""


def build_enhancement_prompt(cv: CVDocument, focused: list[FocusedRecommendation]) -> str:
    """Enhance the CV JSON in place, applying the focused recommendations."""
    cv_json = json.dumps(cv.model_dump(by_alias=True), ensure_ascii=False)
    improvements = "\n".join(f"{i}. {rec.section}: {rec.focus}" for i, rec in enumerate(focused, 1))

    return f"""INPUT CV JSON:
{cv_json}

APPLY THESE IMPROVEMENTS:
{improvements}

OUTPUT: Return the enhanced CV as a JSON object with the same structure. Apply improvements to existing content only. Response must be valid JSON starting with {{ and ending with }}."""
