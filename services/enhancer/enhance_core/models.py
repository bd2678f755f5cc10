from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .matching import extract_allowed_urls, normalize_for_match, normalize_loose


class Provenance(str, Enum):
    verified = "verified"
    added = "added"


@dataclass(frozen=True)
class SourceText:
    text: str
    comparison: str
    loose: str
    allowed_urls: FrozenSet[str]

    @classmethod
    def from_text(cls, text: str) -> "SourceText":
        comparison = normalize_for_match(text)
        return cls(
            text=text,
            comparison=comparison,
            loose=normalize_loose(comparison),
            allowed_urls=extract_allowed_urls(text),
        )


@dataclass(frozen=True)
class EnhancementRequest:
    target_role: str
    source: SourceText
    guidance_report: Optional[str] = None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return "; ".join(text for text in (_as_text(item) for item in value) if text)
    if isinstance(value, dict):
        for key in ("text", "name", "value", "title"):
            if key in value:
                return _as_text(value[key])
        return ""
    return str(value).strip()


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return [item for item in value if item is not None]
    if isinstance(value, str):
        return [value] if value.strip() else []
    return [value]


def _catalog_list(value: Any) -> List[Any]:
    if isinstance(value, str):
        return [part for part in value.split(",") if part.strip()]
    return _as_list(value)


def _string_list(value: Any) -> List[str]:
    return [text for text in (_as_text(item) for item in _as_list(value)) if text]


def _entry_list(value: Any, name_key: str | None = None) -> List[Dict[str, Any]]:
    entries: List[Dict[str, Any]] = []
    for item in _as_list(value):
        if isinstance(item, dict):
            entries.append(item)
        elif isinstance(item, BaseModel):
            entries.append(item.model_dump())
        elif name_key and _as_text(item):
            entries.append({name_key: _as_text(item)})
    return entries


class _DocumentModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TaggedText(_DocumentModel):
    text: str = ""
    provenance: Optional[Provenance] = None

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, data: Any) -> Any:
        if isinstance(data, TaggedText):
            return data
        if isinstance(data, dict) and "text" in data:
            provenance = data.get("provenance")
            if isinstance(provenance, Provenance):
                return {"text": _as_text(data.get("text")), "provenance": provenance}
            return {"text": _as_text(data.get("text"))}
        return {"text": _as_text(data)}

    @property
    def is_added(self) -> bool:
        return self.provenance == Provenance.added


class Link(_DocumentModel):
    text: str = ""
    href: str = ""

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, data: Any) -> Any:
        if isinstance(data, Link):
            return data
        if isinstance(data, dict):
            if "text" in data:
                return {"text": _as_text(data.get("text")), "href": _as_text(data.get("href"))}
            return {"text": _as_text(data.get("url") or data.get("link"))}
        return {"text": _as_text(data)}


class Identity(_DocumentModel):
    name: str = ""
    email: str = Field("", validation_alias=AliasChoices("email", "mail"))
    phone: str = Field("", validation_alias=AliasChoices("phone", "mobile", "phoneNumber"))
    location: str = ""
    linkedin: Link = Field(
        default_factory=Link, validation_alias=AliasChoices("linkedin", "linkedIn", "linkedin_url")
    )
    github: Link = Field(
        default_factory=Link, validation_alias=AliasChoices("github", "gitHub", "github_url")
    )
    portfolio: Link = Field(
        default_factory=Link, validation_alias=AliasChoices("portfolio", "website", "personalWebsite")
    )

    @field_validator("name", "email", "phone", "location", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("linkedin", "github", "portfolio", mode="before")
    @classmethod
    def _link(cls, value: Any) -> Any:
        return value if value is not None else {}


class ExperienceEntry(_DocumentModel):
    organization: str = Field("", validation_alias=AliasChoices("organization", "company", "employer"))
    title: str = Field("", validation_alias=AliasChoices("title", "position", "role"))
    period: str = Field("", validation_alias=AliasChoices("period", "duration", "dates"))
    achievements: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("achievements", "bullets", "highlights")
    )

    @field_validator("organization", "title", "period", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("achievements", mode="before")
    @classmethod
    def _lines(cls, value: Any) -> List[str]:
        return _string_list(value)


class EducationEntry(_DocumentModel):
    credential: str = Field("", validation_alias=AliasChoices("credential", "degree"))
    institution: str = Field("", validation_alias=AliasChoices("institution", "school", "university"))
    period: str = Field("", validation_alias=AliasChoices("period", "year", "dates", "duration"))
    details: str = ""

    @field_validator("credential", "institution", "period", "details", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _as_text(value)


class ProjectEntry(_DocumentModel):
    name: TaggedText = Field(default_factory=TaggedText, validation_alias=AliasChoices("name", "title"))
    url: Link = Field(default_factory=Link, validation_alias=AliasChoices("url", "link"))
    description: str = ""
    technologies: List[TaggedText] = Field(
        default_factory=list, validation_alias=AliasChoices("technologies", "techStack", "tech")
    )
    highlights: List[str] = Field(default_factory=list)

    @field_validator("name", "url", mode="before")
    @classmethod
    def _scalar(cls, value: Any) -> Any:
        return value if value is not None else {}

    @field_validator("description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("technologies", mode="before")
    @classmethod
    def _catalog(cls, value: Any) -> List[Any]:
        return _catalog_list(value)

    @field_validator("highlights", mode="before")
    @classmethod
    def _lines(cls, value: Any) -> List[str]:
        return _string_list(value)


class CertificationEntry(_DocumentModel):
    name: TaggedText = Field(default_factory=TaggedText, validation_alias=AliasChoices("name", "title"))
    url: Link = Field(default_factory=Link, validation_alias=AliasChoices("url", "link", "credential_url"))

    @field_validator("name", "url", mode="before")
    @classmethod
    def _scalar(cls, value: Any) -> Any:
        return value if value is not None else {}


SkillSet = Union[List[TaggedText], Dict[str, List[TaggedText]]]


class ResumeDocument(_DocumentModel):
    identity: Identity = Field(
        default_factory=Identity,
        validation_alias=AliasChoices("identity", "personalInfo", "personal_info", "header"),
    )
    summary: str = Field(
        "", validation_alias=AliasChoices("summary", "professionalSummary", "professional_summary")
    )
    skills: SkillSet = Field(
        default_factory=list, validation_alias=AliasChoices("skills", "coreSkills", "core_skills")
    )
    experience: List[ExperienceEntry] = Field(
        default_factory=list,
        validation_alias=AliasChoices("experience", "workExperience", "work_experience"),
    )
    education: List[EducationEntry] = Field(default_factory=list)
    projects: List[ProjectEntry] = Field(default_factory=list)
    certifications: List[CertificationEntry] = Field(
        default_factory=list, validation_alias=AliasChoices("certifications", "certs")
    )
    extras: Dict[str, List[TaggedText]] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("extras", "additionalSections", "additional_sections"),
    )

    @field_validator("identity", mode="before")
    @classmethod
    def _identity(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, Identity)) else {}

    @field_validator("summary", mode="before")
    @classmethod
    def _summary(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("skills", mode="before")
    @classmethod
    def _skills(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {
                str(category).strip(): _catalog_list(items)
                for category, items in value.items()
                if str(category).strip()
            }
        return _catalog_list(value)

    @field_validator("experience", "education", mode="before")
    @classmethod
    def _entries(cls, value: Any) -> List[Dict[str, Any]]:
        return _entry_list(value)

    @field_validator("projects", "certifications", mode="before")
    @classmethod
    def _named_entries(cls, value: Any) -> List[Dict[str, Any]]:
        return _entry_list(value, name_key="name")

    @field_validator("extras", mode="before")
    @classmethod
    def _extras(cls, value: Any) -> Dict[str, List[Any]]:
        if not isinstance(value, dict):
            return {}
        return {
            str(category).strip(): _catalog_list(items)
            for category, items in value.items()
            if str(category).strip()
        }
