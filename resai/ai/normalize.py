"""Turn free-form tailoring output back into a trustworthy resume document.

Stages: strip code fences, isolate a JSON object, map field aliases onto the
canonical allow-list, normalize each field's shape, merge into a copy of the
original document. A stage that cannot advance raises ``UnparsableAiResponse``;
nothing is merged unless every stage succeeded.
"""
from __future__ import annotations

import copy
import hashlib
import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from resai.core.errors import UnparsableAiResponse

logger = logging.getLogger(__name__)

_LEADING_FENCE_RE = re.compile(r"^```[\w-]*[ \t]*\r?\n?")
_TRAILING_FENCE_RE = re.compile(r"\r?\n?```\s*$")
_BULLET_SPLIT_RE = re.compile(r"\r?\n|•|- ")
_COMMA_SPLIT_RE = re.compile(r"[,;\n]")


@dataclass(frozen=True)
class SubField:
    name: str
    sources: tuple[str, ...]
    is_list: bool = False
    split_re: re.Pattern | None = None
    text_fallback: tuple[str, ...] = ()


@dataclass(frozen=True)
class EntryShape:
    primary: str
    fields: tuple[SubField, ...]


def _dates() -> tuple[SubField, ...]:
    return (
        SubField("startDate", ("startDate", "from", "start")),
        SubField("endDate", ("endDate", "to", "end")),
    )


FIELD_ALIASES: dict[str, str] = {
    "summary": "professionalSummary",
    "experiences": "experience",
    "workExperience": "experience",
    "projectsList": "projects",
    "skillsList": "skills",
    "educationList": "education",
}

TEXT_FIELDS = frozenset(
    {"fullName", "professionalSummary", "title", "location", "linkedin", "github", "website"}
)

ENTRY_FIELDS: dict[str, EntryShape] = {
    "skills": EntryShape(
        primary="name",
        fields=(
            SubField("name", ("name", "category", "skill")),
            SubField("items", ("items", "skills"), is_list=True, split_re=_COMMA_SPLIT_RE),
        ),
    ),
    "experience": EntryShape(
        primary="position",
        fields=(
            SubField("position", ("position", "title", "role")),
            SubField("company", ("company", "employer")),
            *_dates(),
            SubField(
                "bullets",
                ("bullets", "highlights", "achievements"),
                is_list=True,
                split_re=_BULLET_SPLIT_RE,
                text_fallback=("description", "summary"),
            ),
        ),
    ),
    "projects": EntryShape(
        primary="title",
        fields=(
            SubField("title", ("title", "name")),
            SubField("link", ("link", "url")),
            SubField("tech", ("tech", "technologies", "stack"), is_list=True, split_re=_COMMA_SPLIT_RE),
            SubField(
                "bullets",
                ("bullets", "highlights"),
                is_list=True,
                split_re=_BULLET_SPLIT_RE,
                text_fallback=("description", "summary"),
            ),
            *_dates(),
        ),
    ),
    "education": EntryShape(
        primary="institution",
        fields=(
            SubField("institution", ("institution", "school", "college", "university")),
            SubField("degree", ("degree", "qualification")),
            *_dates(),
        ),
    ),
    "languages": EntryShape(
        primary="name",
        fields=(
            SubField("name", ("name", "language")),
            SubField("proficiency", ("proficiency", "level")),
        ),
    ),
    "certificates": EntryShape(
        primary="name",
        fields=(
            SubField("name", ("name", "title")),
            SubField("issuer", ("issuer", "organization")),
            SubField("date", ("date", "issued")),
        ),
    ),
}


CANONICAL_FIELDS = TEXT_FIELDS | frozenset(ENTRY_FIELDS)


def strip_code_fences(text: str) -> str:
    clean = (text or "").strip()
    clean = _LEADING_FENCE_RE.sub("", clean, count=1)
    clean = _TRAILING_FENCE_RE.sub("", clean, count=1)
    return clean.strip()


def _matching_brace(text: str, start: int) -> int | None:
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def extract_json_object(text: str) -> dict[str, Any]:
    candidate = (text or "").strip()
    if not candidate:
        raise UnparsableAiResponse("AI response was empty")

    try:
        parsed = json.loads(candidate)
    except ValueError:
        parsed = None
    if isinstance(parsed, dict):
        return parsed

    # Only top-level blocks are candidates; a nested object is never the document.
    start = candidate.find("{")
    while start != -1:
        end = _matching_brace(candidate, start)
        if end is None:
            break
        try:
            parsed = json.loads(candidate[start : end + 1])
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            return parsed
        if start == 0:
            break
        start = candidate.find("{", end + 1)

    raise UnparsableAiResponse("AI response did not contain a JSON object")


def _synthetic_id(field: str, index: int, item: Any) -> str:
    fingerprint = json.dumps(item, sort_keys=True, ensure_ascii=False, default=str)
    return hashlib.sha1(f"{field}:{index}:{fingerprint}".encode("utf-8")).hexdigest()[:8]


def _first_present(entry: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = entry.get(key)
        if value is not None:
            return value
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _as_text_list(value: Any, split_re: re.Pattern | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        items = [_as_text(item) for item in value if item is not None]
    elif isinstance(value, str) and split_re is not None:
        items = [part.strip() for part in split_re.split(value)]
    else:
        items = [_as_text(value)]
    return [item for item in items if item]


def _resolve_sub_field(entry: dict[str, Any], sub: SubField) -> Any:
    raw = _first_present(entry, sub.sources)
    if not sub.is_list:
        return _as_text(raw)
    values = _as_text_list(raw, sub.split_re)
    if not values and sub.text_fallback:
        values = _as_text_list(_as_text(_first_present(entry, sub.text_fallback)), sub.split_re)
    return values


def _normalize_entry(field: str, shape: EntryShape, index: int, item: Any) -> dict[str, Any] | None:
    if item is None or isinstance(item, list):
        return None
    if isinstance(item, dict):
        source = item
    else:
        text = _as_text(item)
        if not text:
            return None
        source = {shape.primary: text}

    existing_id = source.get("id")
    entry: dict[str, Any] = {
        "id": existing_id if existing_id not in (None, "") else _synthetic_id(field, index, item)
    }
    for sub in shape.fields:
        entry[sub.name] = _resolve_sub_field(source, sub)
    return entry


def normalize_entries(field: str, value: Any) -> list[dict[str, Any]]:
    shape = ENTRY_FIELDS[field]
    if isinstance(value, list):
        items = value
    elif isinstance(value, (dict, str, int, float)):
        items = [value]
    else:
        return []
    normalized = []
    for index, item in enumerate(items):
        entry = _normalize_entry(field, shape, index, item)
        if entry is not None:
            normalized.append(entry)
    return normalized


def normalize_fields(parsed: dict[str, Any]) -> dict[str, Any]:
    """Map aliases, drop unknown keys and coerce every kept field into its canonical shape."""
    normalized: dict[str, Any] = {}
    for raw_key, value in parsed.items():
        key = FIELD_ALIASES.get(raw_key, raw_key)
        if key not in CANONICAL_FIELDS:
            logger.info("ai_field_discarded key=%s", raw_key)
            continue
        if raw_key != key and key in parsed:
            # canonical spelling wins over an alias
            continue
        if value is None:
            continue

        if key in TEXT_FIELDS:
            if isinstance(value, (dict, list)):
                logger.info("ai_field_discarded key=%s reason=not_text", raw_key)
                continue
            normalized[key] = _as_text(value)
            continue

        entries = normalize_entries(key, value)
        if entries:
            normalized[key] = entries
    return normalized


def merge_into(original: dict[str, Any] | None, normalized: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(original) if original else {}
    merged.update(copy.deepcopy(normalized))
    return merged


def normalize_tailored_resume(raw_response: str, original: dict[str, Any]) -> dict[str, Any]:
    stripped = strip_code_fences(raw_response)
    parsed = extract_json_object(stripped)
    normalized = normalize_fields(parsed)
    logger.info("ai_tailoring_normalized fields=%s", sorted(normalized))
    return merge_into(original, normalized)
