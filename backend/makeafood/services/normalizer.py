# makeafood/services/normalizer.py
# Raw model text -> validated Recipe
# 1) strip ``` fences and zero-width chars  2) trim  3) json.loads  4) shape check
# Any deviation is a hard failure: a half-valid recipe is worse than an error.

from __future__ import annotations
import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from makeafood.core.errors import ParseError, SchemaError
from makeafood.models.schemas import Recipe

log = logging.getLogger(__name__)

FENCE_RE = re.compile(r"```(?:json)?", re.I)
ZERO_WIDTH_RE = re.compile(r"[\u200b-\u200d\ufeff]")


def clean_model_text(text: str) -> str:
    s = FENCE_RE.sub("", text or "")
    s = ZERO_WIDTH_RE.sub("", s)
    return s.strip()


def _is_str_list(v: Any) -> bool:
    return isinstance(v, list) and len(v) > 0 and all(isinstance(x, str) for x in v)


def validate_recipe(obj: Any) -> Recipe:
    if not isinstance(obj, dict):
        raise SchemaError("Invalid recipe structure returned by model: expected a JSON object")

    title = obj.get("title")
    if not isinstance(title, str) or not title.strip():
        raise SchemaError("Invalid recipe structure returned by model: missing title")
    for key in ("ingredients", "instructions"):
        if not _is_str_list(obj.get(key)):
            raise SchemaError(f"Invalid recipe structure returned by model: {key} must be a non-empty list of strings")

    try:
        return Recipe.model_validate(obj)
    except ValidationError as e:
        # optional fields with the wrong type (e.g. difficulty: 3)
        raise SchemaError(f"Invalid recipe structure returned by model: {e.errors()[0].get('msg', e)}")


def _reject_constant(name: str) -> Any:
    # NaN / Infinity are not JSON and cannot be sent back to the client
    raise ValueError(f"Invalid JSON constant {name}")


def parse_recipe(raw_text: str) -> Recipe:
    cleaned = clean_model_text(raw_text)
    try:
        obj = json.loads(cleaned, parse_constant=_reject_constant)
    except ValueError as e:  # includes json.JSONDecodeError
        log.warning("Model returned non-JSON content: %s (raw=%r)", e, cleaned[:200])
        raise ParseError(str(e), raw=cleaned)

    try:
        return validate_recipe(obj)
    except SchemaError as e:
        log.warning("Model JSON failed recipe validation: %s", e.details)
        raise
