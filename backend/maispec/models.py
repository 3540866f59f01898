from __future__ import annotations

from typing import Any, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer, model_validator

from maispec.classify import LEVELS, Level, classify_level


def coerce_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, Mapping):
        for key in ("statement", "text", "description"):
            candidate = value.get(key)
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()
        return ""
    return str(value).strip()


def coerce_text_list(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    cleaned: list[str] = []
    for entry in value:
        text = coerce_text(entry)
        if text:
            cleaned.append(text)
    return cleaned


class StructuredRequirement(BaseModel):
    """A functional requirement authored as an object with a ``statement`` field."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = None
    level: Level = "SHOULD"
    statement: str = ""
    bullets: list[str] = Field(default_factory=list)
    rationale: str = ""
    standards: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def normalize_fields(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        normalized = dict(data)
        statement = coerce_text(normalized.get("statement"))
        normalized["statement"] = statement

        level = str(normalized.get("level") or "").strip().upper()
        normalized["level"] = level if level in LEVELS else classify_level(statement)

        identifier = normalized.get("id")
        identifier_text = str(identifier).strip() if identifier is not None else ""
        normalized["id"] = identifier_text or None

        normalized["bullets"] = coerce_text_list(normalized.get("bullets"))
        normalized["standards"] = coerce_text_list(normalized.get("standards"))
        normalized["rationale"] = coerce_text(normalized.get("rationale"))
        return normalized

    @property
    def text(self) -> str:
        return self.statement


class PlainStatement(BaseModel):
    """A functional requirement stored as bare text, e.g. after a flat edit."""

    model_config = ConfigDict(frozen=True)

    text: str

    @model_serializer
    def serialize_as_string(self) -> str:
        return self.text


FunctionalItem = Union[StructuredRequirement, PlainStatement]


def to_functional_item(value: Any) -> FunctionalItem | None:
    if isinstance(value, (StructuredRequirement, PlainStatement)):
        return value
    if isinstance(value, str):
        text = value.strip()
        return PlainStatement(text=text) if text else None
    if isinstance(value, Mapping):
        return StructuredRequirement.model_validate(value)
    return None


def item_text(item: FunctionalItem) -> str:
    if isinstance(item, StructuredRequirement):
        return item.statement
    return item.text


def item_level(item: FunctionalItem) -> Level:
    if isinstance(item, StructuredRequirement):
        return item.level
    return classify_level(item.text)


class Risk(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    risk: str = ""
    mitigation: str = ""

    @model_validator(mode="before")
    @classmethod
    def accept_bare_text(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"risk": data.strip(), "mitigation": ""}
        if isinstance(data, Mapping):
            return {"risk": coerce_text(data.get("risk")), "mitigation": coerce_text(data.get("mitigation"))}
        return data


class DocumentModel(BaseModel):
    """Canonical requirements document; the storage-of-record shape."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    title: str = ""
    summary: str = ""
    functional: list[FunctionalItem] = Field(default_factory=list)
    non_functional: list[str] = Field(default_factory=list, alias="nonFunctional")
    constraints: list[str] = Field(default_factory=list)
    out_of_scope: list[str] = Field(default_factory=list, alias="outOfScope")
    risks: list[Risk] = Field(default_factory=list)
    open_questions: list[str] = Field(default_factory=list, alias="openQuestions")
    use_cases: list[str] = Field(default_factory=list, alias="useCases")

    @field_validator("title", "summary", mode="before")
    @classmethod
    def coerce_scalar_text(cls, value: Any) -> str:
        return coerce_text(value)

    @field_validator("functional", mode="before")
    @classmethod
    def coerce_functional(cls, value: Any) -> list[FunctionalItem]:
        if not isinstance(value, (list, tuple)):
            return []
        items: list[FunctionalItem] = []
        for entry in value:
            item = to_functional_item(entry)
            if item is not None:
                items.append(item)
        return items

    @field_validator(
        "non_functional",
        "constraints",
        "out_of_scope",
        "open_questions",
        "use_cases",
        mode="before",
    )
    @classmethod
    def coerce_text_lists(cls, value: Any) -> list[str]:
        return coerce_text_list(value)

    @field_validator("risks", mode="before")
    @classmethod
    def coerce_risks(cls, value: Any) -> list[Any]:
        if not isinstance(value, (list, tuple)):
            return []
        return [entry for entry in value if isinstance(entry, (str, Mapping, Risk))]

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
