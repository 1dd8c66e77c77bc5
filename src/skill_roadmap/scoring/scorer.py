"""Deterministic multi-category résumé scorer.

Every sub-score is a capped point value from regex checks over the
document's prose plus its structured fields. Checks run on the normalized
form the content hash is computed from, so documents that share a hash
share a score. No clock, no randomness: the same document always yields
the same report.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from skill_roadmap.config import ScoringConfig
from skill_roadmap.models.resume import ResumeDocument, parse_resume_document
from skill_roadmap.models.scoring import CategoryScore, Recommendation, ScoreReport
from skill_roadmap.scoring import patterns as p
from skill_roadmap.utils.content_hash import compute_content_hash, normalize_fields

logger = logging.getLogger(__name__)

SUBSCORE_MAXIMA: dict[str, dict[str, int]] = {
    "content_quality": {
        "achievement_quantification": 15,
        "action_verb_usage": 12,
        "impact_statements": 10,
        "industry_terminology": 8,
        "clarity_and_conciseness": 10,
        "error_free_writing": 5,
    },
    "structural_integrity": {
        "logical_flow": 15,
        "section_completeness": 12,
        "consistent_formatting": 10,
        "appropriate_length": 8,
        "visual_hierarchy": 10,
        "contact_information": 5,
    },
    "professional_presentation": {
        "professional_tone": 12,
        "brand_consistency": 10,
        "personal_summary": 8,
        "relevant_keywords": 10,
        "modern_formatting": 8,
        "error_free_presentation": 7,
    },
    "skills_alignment": {
        "technical_skills": 15,
        "soft_skills": 10,
        "skill_progression": 8,
        "skill_relevance": 12,
        "skill_demonstration": 10,
        "certifications": 5,
    },
    "experience_depth": {
        "relevant_experience": 20,
        "leadership_examples": 12,
        "project_impact": 10,
        "career_growth": 8,
        "industry_experience": 10,
        "achievement_density": 10,
    },
    "career_progression": {
        "logical_progression": 15,
        "role_evolution": 10,
        "responsibility_growth": 8,
        "skill_development": 7,
        "career_narrative": 10,
        "future_alignment": 5,
    },
    "ats_optimization": {
        "keyword_density": 12,
        "format_compatibility": 10,
        "section_headers": 8,
        "file_format": 5,
        "text_readability": 8,
        "metadata_optimization": 7,
    },
    "industry_relevance": {
        "industry_keywords": 12,
        "current_trends": 8,
        "technology_stack": 10,
        "methodology_alignment": 7,
        "certification_relevance": 8,
        "network_indicators": 5,
    },
}

CATEGORY_LABELS = {
    "content_quality": "Content quality",
    "structural_integrity": "Structure",
    "professional_presentation": "Professional presentation",
    "skills_alignment": "Skills alignment",
    "experience_depth": "Experience depth",
    "career_progression": "Career progression",
    "ats_optimization": "ATS optimization",
    "industry_relevance": "Industry relevance",
}

# Shown when a sub-score lands below half its maximum.
SUBSCORE_HINTS = {
    "achievement_quantification": "Quantify achievements with numbers, percentages or amounts.",
    "action_verb_usage": "Open bullet points with strong action verbs.",
    "impact_statements": "Connect actions to outcomes (e.g. 'resulting in ...').",
    "industry_terminology": "Use the technical and business vocabulary of your field.",
    "clarity_and_conciseness": "Aim for 400-800 words and sentences of 10-25 words.",
    "error_free_writing": "Proofread for typos and repeated words.",
    "logical_flow": "Organize content under clear sections in a logical order.",
    "section_completeness": "Include summary, experience, education, skills and projects.",
    "consistent_formatting": "Use consistent dates and bullet points throughout.",
    "appropriate_length": "Adjust length toward one to two pages of content.",
    "visual_hierarchy": "Add section headings and bullet points to aid scanning.",
    "contact_information": "Provide email, phone and location.",
    "professional_tone": "Avoid first-person pronouns and informal language.",
    "brand_consistency": "Show your listed skills in action within experience entries.",
    "personal_summary": "Add a concise 2-4 sentence professional summary.",
    "relevant_keywords": "Mention the tools and concepts your target roles ask for.",
    "modern_formatting": "Add profile links (LinkedIn, GitHub) and avoid tables or box drawings.",
    "error_free_presentation": "Remove typos, repeated words and excessive punctuation.",
    "technical_skills": "List concrete technical skills and tools.",
    "soft_skills": "Evidence soft skills such as communication and collaboration.",
    "skill_progression": "Indicate proficiency levels and ongoing learning.",
    "skill_relevance": "Reference your skills inside experience and project descriptions.",
    "skill_demonstration": "Pair skills with measurable results.",
    "certifications": "Add relevant certifications.",
    "relevant_experience": "Describe each role with dates and scope.",
    "leadership_examples": "Include examples of leading, mentoring or owning work.",
    "project_impact": "Describe projects and their measurable impact.",
    "career_growth": "Make promotions and growing seniority visible.",
    "industry_experience": "Name the industries and domains you have worked in.",
    "achievement_density": "Give each role several concrete achievements.",
    "logical_progression": "List roles in reverse-chronological order with dates.",
    "role_evolution": "Show how your titles evolved over time.",
    "responsibility_growth": "Highlight growing ownership, budgets or teams.",
    "skill_development": "Mention courses, certifications or new skills acquired.",
    "career_narrative": "Tell a coherent story in your summary.",
    "future_alignment": "State the kind of role you are pursuing next.",
    "keyword_density": "Use role keywords naturally, without stuffing.",
    "format_compatibility": "Avoid tables and graphic characters that ATS parsers drop.",
    "section_headers": "Use standard section headers (Experience, Education, Skills).",
    "file_format": "Submit as PDF or DOCX.",
    "text_readability": "Keep sentences short and scannable.",
    "metadata_optimization": "Give the file and document a descriptive title.",
    "industry_keywords": "Add business terms such as stakeholders, KPIs or budgets.",
    "current_trends": "Reference current trends relevant to your field.",
    "technology_stack": "Describe the technology stack you work with.",
    "methodology_alignment": "Mention methodologies such as Agile or CI/CD.",
    "certification_relevance": "Add certifications tied to your target technologies.",
    "network_indicators": "Show community presence: talks, open source, profiles.",
}

CATEGORY_ACTIONS = {
    "content_quality": [
        "Rewrite bullets as action verb + task + measurable result.",
        "Add at least one metric to each role.",
    ],
    "structural_integrity": [
        "Use standard sections in reverse-chronological order.",
        "Complete the contact block.",
    ],
    "professional_presentation": [
        "Write a focused professional summary.",
        "Remove first-person and informal phrasing.",
    ],
    "skills_alignment": [
        "Group skills by type and mark proficiency.",
        "Tie each key skill to an experience bullet.",
    ],
    "experience_depth": [
        "Add leadership and ownership examples.",
        "Quantify project outcomes.",
    ],
    "career_progression": [
        "Make title changes and promotions explicit.",
        "State the direction you are heading.",
    ],
    "ats_optimization": [
        "Mirror keywords from target postings.",
        "Save as PDF or DOCX with plain formatting.",
    ],
    "industry_relevance": [
        "Reference current tools, methods and trends.",
        "Add relevant certifications and community links.",
    ],
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class _Context:
    """Pre-computed views of one document shared by all checks."""

    def __init__(self, doc: ResumeDocument):
        self.doc = doc
        self.text = doc.full_text()
        self.words = p.word_count(self.text)
        self.bullets = p.count(p.BULLET, self.text)
        info = doc.personal_info
        self.summary = (info.summary or "") if info else ""
        self.email = bool((info and info.email) or p.has(p.EMAIL, self.text))
        self.phone = bool((info and info.phone) or p.has(p.PHONE, self.text))
        self.location = bool(info and info.location)
        self.typos = p.has(p.TYPO, self.text)
        self.repeats = p.has(p.REPEATED_WORD, self.text)
        self.tech_skills = p.distinct(p.TECH_SKILL, self.text)
        self.skill_names = {s.name.strip().lower() for s in doc.skills if s.name.strip()}
        self.headers = {
            line.strip().lower()
            for pattern in (p.SECTION_HEADER, p.LABEL_HEADER, p.MARKDOWN_HEADER)
            for line in (m.group(0) for m in pattern.finditer(doc.content))
        }
        self.sections = self._sections()
        self.evidence = self._evidence_lines()
        self.titles = [e.title for e in doc.experience if e.title]
        self.years = sorted(int(y) for y in _years(self.text))

    def _sections(self) -> set[str]:
        found = {m.group(1).lower() for m in p.SECTION_HEADER.finditer(self.doc.content)}
        normalized = set()
        for name in found:
            if name in ("profile", "objective"):
                normalized.add("summary")
            elif name in ("work history", "employment"):
                normalized.add("experience")
            elif name == "technical skills":
                normalized.add("skills")
            else:
                normalized.add(name)
        doc = self.doc
        if self.summary:
            normalized.add("summary")
        if doc.experience:
            normalized.add("experience")
        if doc.education:
            normalized.add("education")
        if doc.skills:
            normalized.add("skills")
        if doc.projects:
            normalized.add("projects")
        if doc.certifications:
            normalized.add("certifications")
        return normalized

    def _evidence_lines(self) -> list[str]:
        """Lines that describe work done, as opposed to lists of skills."""
        lines: list[str] = []
        for exp in self.doc.experience:
            if exp.description:
                lines.extend(exp.description.splitlines())
            lines.extend(exp.achievements)
        for proj in self.doc.projects:
            lines.append(f"{proj.description} {' '.join(proj.technologies)}")
        lines.extend(
            line for line in self.doc.content.splitlines() if p.BULLET.match(line)
        )
        return [line for line in lines if line.strip()]


def _years(text: str) -> list[str]:
    return p.YEAR.findall(text)


class MultiFactorScorer:
    """Scores a résumé across eight weighted categories."""

    def __init__(self, config: ScoringConfig | None = None):
        self.config = config or ScoringConfig()
        self.weights = self.config.weights()

    @property
    def config_digest(self) -> str:
        """Short fingerprint of the category weights, for cache keys."""
        return compute_content_hash(self.weights)[:12]

    def score(self, document: ResumeDocument | dict[str, Any] | str | bytes) -> ScoreReport:
        """Score a document. Raises InvalidResumeError if it cannot be parsed."""
        doc = parse_resume_document(document)
        ctx = _Context(ResumeDocument.model_validate(normalize_fields(doc)))

        raw = {
            "content_quality": self._content_quality(ctx),
            "structural_integrity": self._structural_integrity(ctx),
            "professional_presentation": self._professional_presentation(ctx),
            "skills_alignment": self._skills_alignment(ctx),
            "experience_depth": self._experience_depth(ctx),
            "career_progression": self._career_progression(ctx),
            "ats_optimization": self._ats_optimization(ctx),
            "industry_relevance": self._industry_relevance(ctx),
        }

        categories: dict[str, CategoryScore] = {}
        for name, subscores in raw.items():
            maxima = SUBSCORE_MAXIMA[name]
            capped = {k: max(0, min(maxima[k], int(v))) for k, v in subscores.items()}
            categories[name] = CategoryScore(
                score=sum(capped.values()),
                max_score=sum(maxima.values()),
                subscores=capped,
                insights=[SUBSCORE_HINTS[k] for k, v in capped.items() if v < maxima[k] / 2],
            )

        weighted = sum(cat.normalized * self.weights[name] for name, cat in categories.items())
        overall = max(0, min(100, _round_half_up(weighted)))
        logger.debug("Scored résumé: overall=%d words=%d", overall, ctx.words)

        return ScoreReport(
            overall=overall,
            categories=categories,
            strengths=[
                f"{CATEGORY_LABELS[name]} is strong ({_round_half_up(cat.normalized)}%)"
                for name, cat in categories.items()
                if cat.normalized >= 80
            ],
            weaknesses=[
                f"{CATEGORY_LABELS[name]} needs work ({_round_half_up(cat.normalized)}%)"
                for name, cat in categories.items()
                if cat.normalized < 60
            ],
            recommendations=self._recommendations(categories),
        )

    def _recommendations(self, categories: dict[str, CategoryScore]) -> list[Recommendation]:
        recs = []
        for name, cat in categories.items():
            if cat.normalized >= 80:
                continue
            if cat.normalized < 40:
                priority = "high"
            elif cat.normalized < 60:
                priority = "medium"
            else:
                priority = "low"
            recs.append(
                Recommendation(
                    category=name,
                    priority=priority,
                    title=f"Improve {CATEGORY_LABELS[name].lower()}",
                    actions=CATEGORY_ACTIONS[name] + cat.insights[:2],
                )
            )
        order = {"high": 0, "medium": 1, "low": 2}
        # stable sort keeps category order inside a priority
        return sorted(recs, key=lambda r: (order[r.priority], categories[r.category].normalized))

    # --- categories ---

    def _content_quality(self, c: _Context) -> dict[str, int]:
        text = c.text
        empty = c.words == 0
        metrics = p.has(p.METRIC, text)
        achievements = p.has(p.ACHIEVEMENT, text)
        if metrics and achievements:
            quant = 15
        elif metrics or achievements:
            quant = 10
        else:
            quant = 5 if p.count(p.NUMBER, text) > 5 else 0

        strong, action = p.has(p.STRONG_VERB, text), p.has(p.ACTION_VERB, text)
        verbs = 12 if strong and action else 8 if strong or action else (0 if empty else 4)

        impact, cause = p.has(p.IMPACT, text), p.has(p.CAUSE_EFFECT, text)
        impact_pts = 10 if impact and cause else 6 if impact or cause else (0 if empty else 2)

        tech, business = p.has(p.TECH_TERM, text), p.has(p.BUSINESS_TERM, text)
        terms = 8 if tech and business else 5 if tech or business else (0 if empty else 2)

        clarity = 0
        if not empty:
            clarity += p.band(c.words, [(400, 800, 5), (300, 1000, 3)], 1)
            clarity += p.band(p.average_words_per_sentence(text), [(15, 20, 3), (10, 25, 2)], 1)
            clarity += 2 if c.bullets >= 10 else 1 if c.bullets >= 5 else 0

        errors = 0 if empty else 5 - (2 if c.typos else 0) - (1 if c.repeats else 0)

        return {
            "achievement_quantification": quant,
            "action_verb_usage": verbs,
            "impact_statements": impact_pts,
            "industry_terminology": terms,
            "clarity_and_conciseness": clarity,
            "error_free_writing": errors,
        }

    def _structural_integrity(self, c: _Context) -> dict[str, int]:
        doc = c.doc
        empty = c.words == 0
        if c.sections and p.has(p.TRANSITION, c.text):
            flow = 15
        elif c.sections:
            flow = 10
        else:
            flow = 0 if empty else 5

        info = doc.personal_info
        completeness = (
            (2 if info and (info.first_name or info.last_name) else 0)
            + (3 if "experience" in c.sections else 0)
            + (2 if "education" in c.sections else 0)
            + (2 if "skills" in c.sections else 0)
            + (2 if "projects" in c.sections else 0)
            + (1 if "summary" in c.sections else 0)
        )

        dates, bullets = p.count(p.DATE, c.text), c.bullets
        if dates and bullets:
            formatting = 10
        elif dates or bullets:
            formatting = 6
        else:
            formatting = 0 if empty else 3

        length = 0 if empty else p.band(c.words, [(400, 800, 8), (300, 1000, 6), (200, 1200, 4)], 2)

        headers = len(c.headers) or len(c.sections)
        if headers > 3 and bullets > 5:
            hierarchy = 10
        elif headers > 2 and bullets > 3:
            hierarchy = 7
        elif headers > 1 or bullets > 2:
            hierarchy = 4
        else:
            hierarchy = 0 if empty else 2

        contact = (2 if c.email else 0) + (2 if c.phone else 0) + (1 if c.location else 0)

        return {
            "logical_flow": flow,
            "section_completeness": completeness,
            "consistent_formatting": formatting,
            "appropriate_length": length,
            "visual_hierarchy": hierarchy,
            "contact_information": contact,
        }

    def _professional_presentation(self, c: _Context) -> dict[str, int]:
        text = c.text
        empty = c.words == 0

        tone = 0
        if not empty:
            tone = 12
            if p.count(p.FIRST_PERSON, text) > 3:
                tone -= 4
            if p.has(p.INFORMAL, text):
                tone -= 4

        evidence = " ".join(c.evidence).lower()
        shown = sum(1 for name in c.skill_names | c.tech_skills if name in evidence)
        brand = (4 if c.doc.title or c.summary else 0) + min(6, 2 * shown)

        summary_words = p.word_count(c.summary)
        if summary_words == 0:
            summary = 0
        elif summary_words < 20:
            summary = 4
        elif summary_words <= 80:
            summary = 8
        else:
            summary = 6

        keywords = len(c.tech_skills | p.distinct(p.TECH_TERM, text) | p.distinct(p.BUSINESS_TERM, text))

        modern = 0
        if not empty:
            modern += 4 if p.has(p.URL, text) or p.has(p.NETWORK, text) else 0
            modern += 2 if c.bullets >= 3 else 0
            modern += 0 if p.has(p.FORMAT_BREAKERS, c.doc.content) else 2

        presentation = 0
        if not empty:
            presentation = 7 - (3 if c.typos else 0) - (2 if c.repeats else 0)
            presentation -= 2 if text.count("!") > 2 else 0

        return {
            "professional_tone": tone,
            "brand_consistency": brand,
            "personal_summary": summary,
            "relevant_keywords": keywords,
            "modern_formatting": modern,
            "error_free_presentation": presentation,
        }

    def _skills_alignment(self, c: _Context) -> dict[str, int]:
        text = c.text
        all_skills = c.skill_names | c.tech_skills
        technical = 2 * len(all_skills)
        soft = 3 * len(p.distinct(p.SOFT_SKILL, text))

        levels = [s.level for s in c.doc.skills if s.level not in (None, "")]
        progression = 0
        if c.doc.skills and levels:
            progression += 4 if len(levels) * 2 >= len(c.doc.skills) else 2
            progression += 2 if len({str(level).lower() for level in levels}) > 1 else 0
        progression += 2 if p.has(p.LEARNING, text) else 0

        evidence = [line.lower() for line in c.evidence]
        in_context = {name for name in all_skills if any(name in line for line in evidence)}
        relevance = 3 * len(in_context)

        demonstrated = sum(
            1
            for line in evidence
            if any(name in line for name in all_skills)
            and (p.has(p.METRIC, line) or p.has(p.ACHIEVEMENT, line))
        )
        demonstration = 3 * demonstrated

        if len(c.doc.certifications) >= 2:
            certs = 5
        elif c.doc.certifications or p.has(p.CERTIFICATION, text):
            certs = 3
        else:
            certs = 0

        return {
            "technical_skills": technical,
            "soft_skills": soft,
            "skill_progression": progression,
            "skill_relevance": relevance,
            "skill_demonstration": demonstration,
            "certifications": certs,
        }

    def _experience_depth(self, c: _Context) -> dict[str, int]:
        text = c.text
        roles = len(c.doc.experience) or len(
            [line for line in c.doc.content.splitlines() if len(p.DATE.findall(line)) >= 2]
        )
        span = (c.years[-1] - c.years[0]) if len(c.years) >= 2 else 0
        relevant = min(12, 4 * roles) + min(8, span)

        leadership = 3 * p.count(p.LEADERSHIP, text) + (3 if p.has(p.TEAM_SIZE, text) else 0)

        project_lines = sum(
            1 for line in text.splitlines() if p.has(p.PROJECT, line) and p.has(p.METRIC, line)
        )
        project_impact = 3 * len(c.doc.projects) + 2 * project_lines

        growth = _seniority_growth(c.titles, high=8, flat=4, single=2)

        industries = len(p.distinct(p.INDUSTRY, text))
        industry = 4 * industries + (2 if p.has(p.TECH_TERM, text) else 0)

        achievement_lines = sum(
            1 for line in c.evidence if p.has(p.METRIC, line) or p.has(p.ACHIEVEMENT, line)
        )
        per_role = achievement_lines / max(1, roles)
        if per_role >= 3:
            density = 10
        elif per_role >= 2:
            density = 7
        elif per_role >= 1:
            density = 4
        else:
            density = 2 if achievement_lines else 0

        return {
            "relevant_experience": relevant,
            "leadership_examples": leadership,
            "project_impact": project_impact,
            "career_growth": growth,
            "industry_experience": industry,
            "achievement_density": density,
        }

    def _career_progression(self, c: _Context) -> dict[str, int]:
        text = c.text
        experience = c.doc.experience
        starts = [_first_year(e.start_date) for e in experience]
        if len(experience) >= 2 and all(y is not None for y in starts):
            ordered = starts == sorted(starts, reverse=True) or starts == sorted(starts)
            logical = 15 if ordered else 8
        elif len(experience) == 1 and starts[0] is not None:
            logical = 8
        elif experience or c.years:
            logical = 4
        else:
            logical = 0

        ranks = {_rank(t) for t in c.titles} - {None}
        evolution = 4 * (len(ranks) - 1) + 2 if ranks else 0

        responsibility = 2 * p.count(p.RESPONSIBILITY, text)
        development = 2 * p.count(p.LEARNING, text) + (3 if c.doc.certifications else 0)
        narrative = (
            (4 if c.summary else 0)
            + (3 if p.has(p.NARRATIVE, text) else 0)
            + (3 if p.has(p.TRANSITION, text) else 0)
        )
        future = 5 if p.has(p.GOAL, text) else 0

        return {
            "logical_progression": logical,
            "role_evolution": evolution,
            "responsibility_growth": responsibility,
            "skill_development": development,
            "career_narrative": narrative,
            "future_alignment": future,
        }

    def _ats_optimization(self, c: _Context) -> dict[str, int]:
        text = c.text
        empty = c.words == 0
        hits = p.count(p.TECH_SKILL, text) + p.count(p.TECH_TERM, text) + p.count(p.BUSINESS_TERM, text)
        density = hits / c.words * 100 if c.words else 0.0
        keyword_density = p.band(density, [(2, 8, 12), (1, 12, 8)], 4 if hits else 0)

        compatibility = 0 if empty else (5 if p.has(p.FORMAT_BREAKERS, c.doc.content) else 10)
        headers = 2 * len(c.sections & set(p.SECTION_NAMES))

        meta = c.doc.metadata
        file_type = (meta.file_type or "").lower() if meta else ""
        if not file_type and meta and meta.original_file_name:
            file_type = meta.original_file_name.rsplit(".", 1)[-1].lower()
        if not file_type:
            file_format = 3
        else:
            file_format = 5 if file_type in p.ATS_FILE_TYPES else 1

        readability = 0
        if not empty:
            readability = p.band(p.average_words_per_sentence(text), [(8, 25, 8), (5, 35, 5)], 2)

        metadata = (
            (3 if c.doc.title else 0)
            + (2 if meta and meta.original_file_name else 0)
            + (2 if c.email else 0)
        )

        return {
            "keyword_density": keyword_density,
            "format_compatibility": compatibility,
            "section_headers": headers,
            "file_format": file_format,
            "text_readability": readability,
            "metadata_optimization": metadata,
        }

    def _industry_relevance(self, c: _Context) -> dict[str, int]:
        text = c.text
        business = 3 * len(p.distinct(p.BUSINESS_TERM, text) | p.distinct(p.INDUSTRY, text))
        trends = 3 * len(p.distinct(p.TREND, text))
        stack_size = len(c.tech_skills)
        stack = p.band(stack_size, [(6, math.inf, 10), (4, 5, 7), (2, 3, 4), (1, 1, 2)], 0)
        methodology = 3 * len(p.distinct(p.METHODOLOGY, text))

        tech_certs = sum(
            1
            for cert in c.doc.certifications
            if p.has(p.TECH_SKILL, cert) or p.has(p.TECH_TERM, cert) or p.has(p.CERTIFICATION, cert)
        )
        cert_relevance = 4 * tech_certs or (3 if p.has(p.CERTIFICATION, text) else 0)

        network = 2 * len(p.distinct(p.NETWORK, text)) + (1 if p.has(p.URL, text) else 0)

        return {
            "industry_keywords": business,
            "current_trends": trends,
            "technology_stack": stack,
            "methodology_alignment": methodology,
            "certification_relevance": cert_relevance,
            "network_indicators": network,
        }


def _rank(title: str) -> int | None:
    ranks = [p.SENIORITY_RANK[m.group(1).lower()] for m in p.SENIORITY.finditer(title)]
    return max(ranks) if ranks else None


def _first_year(value: str | None) -> int | None:
    if not value:
        return None
    years = _years(value)
    return int(years[0]) if years else None


def _seniority_growth(titles: list[str], *, high: int, flat: int, single: int) -> int:
    """Points for seniority growth between the oldest and newest listed title.

    Titles are assumed newest first, the usual résumé order.
    """
    ranks = [r for r in (_rank(t) for t in titles) if r is not None]
    if not ranks:
        return single if titles else 0
    if len(ranks) == 1:
        return single
    if ranks[0] > ranks[-1]:
        return high
    return flat
