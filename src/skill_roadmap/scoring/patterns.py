"""Regexes and text helpers shared by the résumé scorer."""

from __future__ import annotations

import re


def _words(*terms: str) -> re.Pattern:
    return re.compile(r"\b(?:" + "|".join(terms) + r")\b", re.IGNORECASE)


METRIC = re.compile(r"\d+(?:\.\d+)?\s?%|\d+\+|\b\d+[km]\b|\$\s?\d[\d,]*|\b\d+x\b|\b\d+\.\d+\b", re.IGNORECASE)
NUMBER = re.compile(r"\b\d[\d,.]*\b")
YEAR = re.compile(r"\b(?:19|20)\d{2}\b")
BULLET = re.compile(r"^\s*(?:[-*•]|\d+\.)\s+", re.MULTILINE)
SENTENCE_SPLIT = re.compile(r"[.!?]+")
DATE = re.compile(
    r"\b(?:19|20)\d{2}\b|\b\d{1,2}/\d{2,4}\b"
    r"|\b(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?\s+\d{4}\b",
    re.IGNORECASE,
)
LABEL_HEADER = re.compile(r"^[a-z][a-z &/]{2,40}:$", re.MULTILINE)
MARKDOWN_HEADER = re.compile(r"^#{1,3}\s+\S", re.MULTILINE)
EMAIL = re.compile(r"[\w.+-]+@[\w-]+\.[\w.]+")
PHONE = re.compile(r"\+?\d[\d\s().-]{7,}\d")
URL = re.compile(r"https?://\S+|\bwww\.\S+", re.IGNORECASE)
NETWORK = re.compile(r"linkedin\.com|github\.com|portfolio|speaker|conference|meetup|open[- ]source", re.IGNORECASE)
REPEATED_WORD = re.compile(r"\b(\w+)\s+\1\b", re.IGNORECASE)
FIRST_PERSON = _words("i", "me", "my", "mine")
INFORMAL = _words("stuff", "things", "lots", "kinda", "gonna", "wanna", "awesome", "cool", "basically")
PRESENT_ROLE = _words("present", "current", "now")

ACHIEVEMENT = _words(
    "increased", "decreased", "improved", "reduced", "saved", "generated",
    "achieved", "delivered", "exceeded", "surpassed", "grew", "cut",
)
STRONG_VERB = _words(
    "achieved", "accomplished", "delivered", "executed", "facilitated", "initiated",
    "orchestrated", "spearheaded", "transformed", "streamlined", "optimized",
    "implemented", "developed", "created", "built", "launched", "managed", "led",
    "directed", "coordinated",
)
ACTION_VERB = _words(
    "designed", "analyzed", "researched", "planned", "organized", "supervised",
    "trained", "mentored", "collaborated", "communicated", "presented",
    "negotiated", "solved", "improved", "enhanced",
)
IMPACT = _words(
    "result", "results", "impact", "outcome", "success", "growth", "increase",
    "decrease", "efficiency", "productivity", "revenue", "cost", "quality", "performance",
)
CAUSE_EFFECT = re.compile(
    r"\b(?:because|due to|resulting in|leading to|enabling|allowing|which (?:cut|reduced|increased))\b",
    re.IGNORECASE,
)
TECH_TERM = re.compile(
    r"\b(?:api|apis|database|framework|algorithm|architecture|infrastructure|deployment|"
    r"scalability|microservices|cloud|devops|ci/cd|kubernetes|docker|aws|azure|gcp)\b",
    re.IGNORECASE,
)
BUSINESS_TERM = _words(
    "strategy", "stakeholder", "stakeholders", "budget", "roi", "kpi", "kpis",
    "metrics", "analytics", "process", "workflow", "roadmap",
)
TYPO = _words(
    "teh", "adn", "recieve", "seperate", "occured", "definately", "accomodate",
    "begining", "existance", "occurence",
)
TRANSITION = re.compile(
    r"\b(?:additionally|furthermore|moreover|consequently|therefore|as a result)\b", re.IGNORECASE
)
SECTION_NAMES = ("summary", "experience", "education", "skills", "projects", "certifications")
SECTION_HEADER = re.compile(
    r"^\s*(?:#{1,3}\s*)?(summary|profile|objective|experience|work history|employment|"
    r"education|skills|technical skills|projects|certifications)\s*:?\s*$",
    re.IGNORECASE | re.MULTILINE,
)
SOFT_SKILL = _words(
    "communication", "teamwork", "leadership", "collaboration", "problem[- ]solving",
    "adaptability", "mentoring", "presentation", "negotiation", "time management",
)
TECH_SKILL = re.compile(
    r"\b(?:python|java|javascript|typescript|go|rust|c\+\+|c#|sql|react|node\.js|django|"
    r"flask|spring|kubernetes|docker|aws|azure|gcp|terraform|linux|git|postgresql|"
    r"mysql|redis|kafka|spark|pandas|tensorflow|pytorch)(?![\w+#])",
    re.IGNORECASE,
)
CERTIFICATION = re.compile(
    r"\b(?:certified|certification|certificate|aws certified|pmp|cissp|ckad|cka|scrum master)\b",
    re.IGNORECASE,
)
LEADERSHIP = _words(
    "led", "lead", "managed", "mentored", "supervised", "directed", "headed",
    "coached", "owned", "spearheaded",
)
TEAM_SIZE = re.compile(r"\b(?:team|group) of \d+|\b\d+[- ](?:person|engineer|member)", re.IGNORECASE)
PROJECT = _words("project", "projects", "launched", "shipped", "released", "migrated", "rolled out")
SENIORITY = re.compile(
    r"\b(intern|junior|associate|engineer|developer|analyst|senior|lead|staff|principal|"
    r"manager|head|director|vp|chief)\b",
    re.IGNORECASE,
)
SENIORITY_RANK = {
    "intern": 0, "junior": 1, "associate": 1, "engineer": 2, "developer": 2,
    "analyst": 2, "senior": 3, "lead": 4, "staff": 4, "principal": 5,
    "manager": 4, "head": 5, "director": 6, "vp": 7, "chief": 8,
}
RESPONSIBILITY = _words("owned", "responsible", "oversaw", "accountable", "budget", "hired", "scaled")
LEARNING = _words("learned", "trained", "certified", "course", "bootcamp", "upskilled", "studied")
NARRATIVE = re.compile(r"\b(?:years? of experience|specializ\w+|passionate about|focused on|career)\b", re.IGNORECASE)
GOAL = re.compile(r"\b(?:seeking|aspire|goal|looking to|aim to|objective)\b", re.IGNORECASE)
TREND = _words(
    "ai", "machine learning", "llm", "generative", "cloud[- ]native", "serverless",
    "data[- ]driven", "automation", "observability", "security",
)
METHODOLOGY = _words("agile", "scrum", "kanban", "lean", "tdd", "devops", "ci/cd", "six sigma")
INDUSTRY = _words(
    "saas", "fintech", "healthcare", "e-commerce", "ecommerce", "enterprise", "b2b",
    "b2c", "startup", "retail", "logistics", "banking", "insurance",
)
FORMAT_BREAKERS = re.compile(r"[─-╿▀-▟]|\|.*\|")
ATS_FILE_TYPES = {"pdf", "docx", "doc", "txt", "application/pdf",
                  "application/vnd.openxmlformats-officedocument.wordprocessingml.document"}


def word_count(text: str) -> int:
    return len(text.split())


def count(pattern: re.Pattern, text: str) -> int:
    return len(pattern.findall(text))


def has(pattern: re.Pattern, text: str) -> bool:
    return pattern.search(text) is not None


def distinct(pattern: re.Pattern, text: str) -> set[str]:
    return {m.group(0).lower() for m in pattern.finditer(text)}


def average_words_per_sentence(text: str) -> float:
    sentences = [s for s in SENTENCE_SPLIT.split(text) if s.strip()]
    if not sentences:
        return 0.0
    return sum(len(s.split()) for s in sentences) / len(sentences)


def band(value: float, bands: list[tuple[float, float, int]], default: int) -> int:
    """Points for the first ``(low, high, points)`` band containing ``value``."""
    for low, high, points in bands:
        if low <= value <= high:
            return points
    return default
