"""Text normalization, CJK detection and script conversion for item names."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
import re

from .script_table import (
    SIMPLIFIED_ONLY,
    SIMPLIFIED_TO_TRADITIONAL,
    TRADITIONAL_ONLY,
    TRADITIONAL_TO_SIMPLIFIED,
)

_WHITESPACE_RE = re.compile(r"\s+")
_CJK_RE = re.compile("[\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff\U00020000-\U0002a6df]")
# ASCII and full-width punctuation OCR tends to hallucinate between glyphs.
_OCR_NOISE_RE = re.compile(r"[.,\-_。，．－＿、・]")
_QUOTES = "\"'“”‘’「」"


class Script(StrEnum):
    TRADITIONAL = "traditional"
    SIMPLIFIED = "simplified"
    AMBIGUOUS = "ambiguous"
    NONE = "none"


class ScriptDirection(StrEnum):
    TO_TRADITIONAL = "to_traditional"
    TO_SIMPLIFIED = "to_simplified"


@dataclass(frozen=True)
class ScriptInfo:
    has_cjk: bool
    script: Script


def normalize(text: str) -> str:
    """Trim, strip catalog quotes and collapse whitespace runs to one space.

    Applying it twice gives the same result as applying it once.
    """
    collapsed = _WHITESPACE_RE.sub(" ", text or "").strip()
    stripped = collapsed.strip(_QUOTES).strip()
    while stripped != collapsed:
        collapsed = stripped
        stripped = collapsed.strip(_QUOTES).strip()
    return stripped


def clean_name(name: str | None) -> str:
    if not name:
        return ""
    return normalize(str(name))


def contains_cjk(text: str) -> bool:
    return bool(text) and _CJK_RE.search(text) is not None


def is_traditional(text: str) -> bool:
    return any(char in TRADITIONAL_ONLY for char in text or "")


def is_simplified(text: str) -> bool:
    return any(char in SIMPLIFIED_ONLY for char in text or "")


def detect_script(text: str) -> ScriptInfo:
    """Classify text by the script-specific characters it contains."""
    if not contains_cjk(text):
        return ScriptInfo(has_cjk=False, script=Script.NONE)
    traditional = is_traditional(text)
    simplified = is_simplified(text)
    if traditional and not simplified:
        script = Script.TRADITIONAL
    elif simplified and not traditional:
        script = Script.SIMPLIFIED
    else:
        script = Script.AMBIGUOUS
    return ScriptInfo(has_cjk=True, script=script)


def convert_script(text: str, direction: ScriptDirection) -> str:
    """Per-character substitution; characters without an entry pass through."""
    if not text:
        return ""
    table = (
        SIMPLIFIED_TO_TRADITIONAL
        if direction == ScriptDirection.TO_TRADITIONAL
        else TRADITIONAL_TO_SIMPLIFIED
    )
    return "".join(table.get(char, char) for char in text)


def opposite_script(text: str) -> str:
    """Conversion used when retrying a search in the other script.

    Traditional input is folded through simplified and back, which rewrites
    variant traditional forms to the ones the catalog uses. Anything else is
    converted simplified to traditional.
    """
    if is_traditional(text):
        simplified = convert_script(text, ScriptDirection.TO_SIMPLIFIED)
        return convert_script(simplified, ScriptDirection.TO_TRADITIONAL)
    return convert_script(text, ScriptDirection.TO_TRADITIONAL)


def tokenize(text: str) -> list[str]:
    """Split on whitespace; text without spaces stays one contiguous token."""
    normalized = normalize(text)
    if not normalized:
        return []
    if " " not in normalized:
        return [normalized]
    return normalized.split(" ")


def normalize_ocr_text(text: str) -> str:
    cleaned = _OCR_NOISE_RE.sub("", text or "")
    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()
    if contains_cjk(cleaned) and not is_traditional(cleaned):
        cleaned = convert_script(cleaned, ScriptDirection.TO_TRADITIONAL)
    return cleaned
