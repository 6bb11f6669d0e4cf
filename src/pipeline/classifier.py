"""Rule tables that turn an aggregator link title into normalized signal fields.

Each table is an ordered list of ``(pattern, classification)`` rules evaluated
top to bottom; the first matching rule wins.
"""

import re

from src.core.schemas import PostType

# Year in the 2020s, not part of a longer number.
_YEAR_RE = re.compile(r"(?<!\d)(202\d)(?!\d)")

# First match wins. "apply online" / "online form" mark an open application,
# so they override the result/admit card/syllabus/answer key keywords.
POST_TYPE_RULES: list[tuple[re.Pattern[str], PostType]] = [
    (re.compile(r"apply\s+online|online\s+form", re.IGNORECASE), PostType.RECRUITMENT),
    (re.compile(r"result", re.IGNORECASE), PostType.RESULT),
    (re.compile(r"admit\s*card", re.IGNORECASE), PostType.ADMIT_CARD),
    (re.compile(r"syllabus", re.IGNORECASE), PostType.SYLLABUS),
    (re.compile(r"answer\s*key", re.IGNORECASE), PostType.ANSWER_KEY),
]

# Phrases removed from a title when deriving the exam name.
_EXAM_NOISE_RE = re.compile(
    r"apply\s+online|online\s+form|notification|recruitment|result|admit\s*card|"
    r"syllabus|answer\s*key|\bexam\s+date\b|\bout\b|\bdownload\b",
    re.IGNORECASE,
)
_SEPARATORS_RE = re.compile(r"[\s\-:|,/()]+")

UNKNOWN_AUTHORITY = "Unknown"


def build_authority_rules(authorities: list[str]) -> list[tuple[re.Pattern[str], str]]:
    """Compile the configured authority list into an ordered rule table.

    Matching is case-sensitive. List order is the tie-break: "SSC" listed
    before "UPSSSC" wins for a title mentioning both.
    """
    return [
        (re.compile(re.escape(name)), name)
        for name in authorities
        if name.strip()
    ]


def first_match(rules: list[tuple[re.Pattern[str], str]], text: str, default: str) -> str:
    for pattern, value in rules:
        if pattern.search(text):
            return value
    return default


def extract_year(title: str) -> str | None:
    """Return the first 2020s year in the title, or None."""
    match = _YEAR_RE.search(title)
    return match.group(1) if match else None


def classify_post_type(title: str) -> PostType:
    for pattern, post_type in POST_TYPE_RULES:
        if pattern.search(title):
            return post_type
    return PostType.RECRUITMENT


def match_authority(title: str, rules: list[tuple[re.Pattern[str], str]]) -> str:
    return first_match(rules, title, UNKNOWN_AUTHORITY)


def normalize_exam(title: str, authority: str, year: str | None) -> str:
    """Derive the exam name by stripping authority, year and post-type phrases.

    >>> normalize_exam("UPSC Civil Services 2026 Apply Online", "UPSC", "2026")
    'Civil Services'
    """
    text = title
    if authority != UNKNOWN_AUTHORITY:
        text = re.sub(re.escape(authority), " ", text, flags=re.IGNORECASE)
    if year:
        text = re.sub(rf"(?<!\d){year}(?!\d)", " ", text)
    text = _EXAM_NOISE_RE.sub(" ", text)
    exam = " ".join(part for part in _SEPARATORS_RE.split(text) if part)
    return exam or title.strip()


def contains_any(text: str, terms: list[str]) -> bool:
    lowered = text.lower()
    return any(term.lower() in lowered for term in terms if term)


def contains_word(text: str, terms: list[str]) -> bool:
    """Like ``contains_any`` but a term must start a word, with an optional plural "s".

    "app" matches "Download App" and "Apps" but not "Apply Online".
    """
    return any(
        re.search(rf"\b{re.escape(term)}s?\b", text, re.IGNORECASE)
        for term in terms
        if term
    )
