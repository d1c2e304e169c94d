"""Check whether a CV holds enough content for AI analysis."""

from models.responses import ValidationReport
from models.schemas.cv_document import CVDocument
from services.text_extractor import count_words, extract_text

# Section weights for the completion score (sum to 100)
PERSONAL_WEIGHT = 40
EXPERIENCE_WEIGHT = 30
EDUCATION_WEIGHT = 15
SKILLS_WEIGHT = 15

MIN_COMPLETION_SCORE = 60
MAX_MISSING_FIELDS = 2


def _word_len(text: str) -> int:
    return len(text.split())


def completion_message(score: int) -> str:
    if score >= 90:
        return "Your CV is comprehensive and ready for analysis!"
    if score >= 75:
        return "Your CV looks good! Minor improvements could enhance the analysis."
    if score >= 60:
        return "Your CV is ready for analysis, but adding more details will improve results."
    if score >= 40:
        return "Your CV needs more information before we can provide meaningful analysis."
    return "Let's build your CV! Add your basic information to get started."


def validate_for_analysis(cv: CVDocument) -> ValidationReport:
    missing: list[str] = []
    recommendations: list[str] = []
    score = 0.0

    # Personal info: name 2, email 1, title 1, summary 1
    p = cv.personal_info
    personal = 0
    if p.name.strip():
        personal += 2
    else:
        missing.append("Full Name")
    if p.email.strip():
        personal += 1
    else:
        missing.append("Email Address")
    if p.title.strip():
        personal += 1
    else:
        missing.append("Job Title/Position")
        recommendations.append("Add your current or desired job title")
    if not p.summary.strip():
        missing.append("Professional Summary")
        recommendations.append("Add a professional summary (2-3 sentences)")
    elif _word_len(p.summary) < 10:
        recommendations.append("Expand your professional summary (aim for 20-50 words)")
    else:
        personal += 1
    score += personal / 5 * PERSONAL_WEIGHT

    experience = 0
    if not any(e.title and e.company for e in cv.experience):
        missing.append("Work Experience")
        recommendations.append("Add at least one work experience entry")
    else:
        experience += 2
        if any(_word_len(e.description) >= 10 for e in cv.experience):
            experience += 1
        else:
            recommendations.append(
                "Add detailed descriptions to your work experience (use bullet points with achievements)"
            )
    score += experience / 3 * EXPERIENCE_WEIGHT

    if any(e.degree and e.institution for e in cv.education):
        score += EDUCATION_WEIGHT
    else:
        missing.append("Education")
        recommendations.append("Add your educational background")

    if not cv.skills:
        missing.append("Skills")
        recommendations.append("Add relevant skills (aim for 5-10 skills)")
    elif len(cv.skills) < 3:
        recommendations.append("Add more skills (aim for 5-10 relevant skills)")
        score += 0.5 * SKILLS_WEIGHT
    else:
        score += SKILLS_WEIGHT

    completion_score = round(score)
    is_valid = completion_score >= MIN_COMPLETION_SCORE and len(missing) <= MAX_MISSING_FIELDS
    if not is_valid and completion_score < MIN_COMPLETION_SCORE:
        recommendations.insert(
            0, "Complete more sections to enable AI analysis (minimum 60% completion required)"
        )

    return ValidationReport(
        is_valid=is_valid,
        completion_score=completion_score,
        missing_fields=missing,
        recommendations=recommendations,
        message=completion_message(completion_score),
        word_count=count_words(extract_text(cv)),
    )
