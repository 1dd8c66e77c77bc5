"""Pydantic models for résumé documents."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from skill_roadmap.errors import InvalidResumeError


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class PersonalInfo(_CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    summary: str | None = None
    linkedin: str | None = None
    website: str | None = None


class ExperienceItem(_CamelModel):
    title: str = ""
    company: str = ""
    start_date: str | None = None
    end_date: str | None = None
    description: str = ""
    achievements: list[str] = []


class EducationItem(_CamelModel):
    degree: str = ""
    institution: str = ""
    field: str | None = None
    graduation_date: str | None = None


class ResumeSkillEntry(_CamelModel):
    name: str
    level: int | str | None = None


class ProjectItem(_CamelModel):
    name: str = ""
    description: str = ""
    technologies: list[str] = []


class ResumeMetadata(_CamelModel):
    original_file_name: str | None = None
    file_size: int | None = None
    file_type: str | None = None
    uploaded_at: str | None = None  # volatile, excluded from content hashes
    updated_at: str | None = None


class ResumeDocument(_CamelModel):
    title: str = ""
    content: str = ""
    file_path: str | None = None
    personal_info: PersonalInfo | None = None
    experience: list[ExperienceItem] = []
    education: list[EducationItem] = []
    skills: list[ResumeSkillEntry] = []
    projects: list[ProjectItem] = []
    certifications: list[str] = []
    metadata: ResumeMetadata | None = None

    def full_text(self) -> str:
        """All prose in the document, one block per line, for pattern checks."""
        parts: list[str] = [self.content] if self.content else []
        if self.personal_info and self.personal_info.summary:
            parts.append(self.personal_info.summary)
        for exp in self.experience:
            parts.append(f"{exp.title} {exp.company}".strip())
            if exp.start_date or exp.end_date:
                parts.append(f"{exp.start_date or ''} - {exp.end_date or ''}")
            if exp.description:
                parts.append(exp.description)
            parts.extend(f"- {a}" for a in exp.achievements)
        for edu in self.education:
            parts.append(" ".join(p for p in (edu.degree, edu.field or "", edu.institution) if p))
        if self.skills:
            parts.append("skills: " + ", ".join(s.name for s in self.skills))
        for proj in self.projects:
            parts.append(f"{proj.name}: {proj.description}")
            if proj.technologies:
                parts.append(", ".join(proj.technologies))
        parts.extend(self.certifications)
        return "\n".join(p for p in parts if p)


def parse_resume_document(payload: str | bytes | dict[str, Any] | ResumeDocument) -> ResumeDocument:
    """Parse a résumé payload.

    Accepts a JSON string/bytes, a dict, or an existing ResumeDocument.
    Raises InvalidResumeError on anything that cannot be parsed; an empty
    JSON object is valid and yields an empty document.
    """
    if isinstance(payload, ResumeDocument):
        return payload
    data: Any = payload
    if isinstance(payload, (str, bytes)):
        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidResumeError(f"Résumé payload is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidResumeError(
            f"Résumé payload must be a JSON object, got {type(data).__name__}"
        )
    try:
        return ResumeDocument.model_validate(data)
    except ValidationError as exc:
        raise InvalidResumeError(f"Résumé payload failed validation: {exc}") from exc
