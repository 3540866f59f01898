from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import re
from typing import Any, Mapping

from pydantic import ValidationError

from maispec.models import DocumentModel

logger = logging.getLogger("maispec.intake")

_OPENING_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*", flags=re.IGNORECASE)
_CLOSING_FENCE_PATTERN = re.compile(r"```$")


class _Unparseable:
    """Sentinel type; compare with ``is`` since valid JSON may itself be falsy."""

    def __repr__(self) -> str:
        return "UNPARSEABLE"


UNPARSEABLE = _Unparseable()


def strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _OPENING_FENCE_PATTERN.sub("", cleaned, count=1)
        cleaned = _CLOSING_FENCE_PATTERN.sub("", cleaned).strip()
    return cleaned


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _loads_strict(text: str) -> Any:
    # NaN and Infinity are not JSON.
    return json.loads(text, parse_constant=_reject_constant)


def parse_raw_output(raw: Any) -> Any:
    """Best-effort extraction of one JSON value from raw model output.

    Returns the parsed value, or :data:`UNPARSEABLE` when neither the cleaned
    text nor the outermost ``{...}`` span is valid JSON. Never raises.
    """
    if isinstance(raw, Mapping):
        return raw

    candidate = strip_code_fence(opaque_text_for(raw))
    try:
        return _loads_strict(candidate)
    except (ValueError, RecursionError):
        pass

    start = candidate.find("{")
    end = candidate.rfind("}")
    if start != -1 and end != -1 and end > start:
        try:
            return _loads_strict(candidate[start : end + 1])
        except (ValueError, RecursionError):
            pass

    return UNPARSEABLE


def opaque_text_for(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    try:
        return json.dumps(raw, indent=2, ensure_ascii=False)
    except (TypeError, ValueError, RecursionError):
        return str(raw)


@dataclass(frozen=True)
class IntakeResult:
    document: DocumentModel | None
    opaque_text: str = ""
    failure: str | None = None

    @property
    def structured(self) -> bool:
        return self.document is not None


def ingest_raw_output(raw: Any) -> IntakeResult:
    """Turn raw model output into a DocumentModel, or fall back to opaque text.

    Unparseable output and objects without a ``functional`` list are both
    recovered into opaque-text mode; nothing is raised to the caller.
    """
    parsed = parse_raw_output(raw)
    if parsed is UNPARSEABLE:
        return _opaque(raw, "parse_failure")
    if not isinstance(parsed, Mapping) or not isinstance(parsed.get("functional"), list):
        return _opaque(raw, "shape_mismatch")

    try:
        document = DocumentModel.model_validate(dict(parsed))
    except ValidationError as exc:
        logger.info(
            "intake_validation_failed",
            extra={"event": "intake_validation_failed", "errors": [issue["msg"] for issue in exc.errors()]},
        )
        return _opaque(raw, "shape_mismatch")

    logger.info(
        "intake_structured",
        extra={
            "event": "intake_structured",
            "functional_count": len(document.functional),
            "non_functional_count": len(document.non_functional),
        },
    )
    return IntakeResult(document=document)


def _opaque(raw: Any, failure: str) -> IntakeResult:
    text = opaque_text_for(raw)
    logger.info(
        "intake_opaque_fallback",
        extra={"event": "intake_opaque_fallback", "failure": failure, "raw_chars": len(text)},
    )
    return IntakeResult(document=None, opaque_text=text, failure=failure)
