"""Flatten a CV document into plain text and count its words.

The text feeds the analysis prompt and the local word count. The word count
here is the one reported to users; values claimed by the model are ignored.
"""

import math
import re

from models.schemas.cv_document import CVDocument

_NON_WORD_RE = re.compile(r"[^\w\s]")

WORDS_PER_PAGE = 250
OPTIMAL_WORDS = (200, 600)


def _join(*parts: str) -> str:
    return " ".join(p.strip() for p in parts if p and p.strip())


def _date_range(start: str, end: str, current: bool) -> str:
    if not (start or end or current):
        return ""
    return f"{start or 'Start'} - {'Present' if current else end or 'End'}"


def extract_text(cv: CVDocument) -> str:
    """Flatten the CV into text with one line per entry and section markers.

    Absent fields contribute nothing; empty sections emit no header.
    """
    lines: list[str] = []

    p = cv.personal_info
    personal = _join(
        p.name, p.title, p.email, p.phone, p.location, p.summary, p.linkedin, p.website
    )
    if personal:
        lines.append(personal)

    if cv.experience:
        lines.append("EXPERIENCE:")
        for exp in cv.experience:
            lines.append(
                _join(
                    exp.title,
                    exp.company,
                    exp.location,
                    _date_range(exp.start_date, exp.end_date, exp.current),
                    exp.description,
                )
            )

    if cv.education:
        lines.append("EDUCATION:")
        for edu in cv.education:
            lines.append(
                _join(
                    edu.degree,
                    edu.institution,
                    edu.location,
                    _date_range(edu.start_date, edu.end_date, edu.current),
                    edu.description,
                )
            )

    if cv.certifications:
        lines.append("CERTIFICATIONS:")
        for cert in cv.certifications:
            lines.append(_join(cert.name, cert.issuer, cert.date, cert.description))

    skills = [s.strip() for s in cv.skills if s and s.strip()]
    if skills:
        lines.append("SKILLS: " + ", ".join(skills))

    return "\n".join(line for line in lines if line)


def count_words(text: str) -> int:
    """Punctuation becomes whitespace, then count non-empty tokens."""
    return len(_NON_WORD_RE.sub(" ", text).split())


def estimate_pages(word_count: int) -> int:
    return max(1, math.ceil(word_count / WORDS_PER_PAGE))


def is_optimal_length(word_count: int) -> bool:
    low, high = OPTIMAL_WORDS
    return low <= word_count <= high
