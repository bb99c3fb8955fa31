# makeafood/services/ingredients.py
# Ingredient input cleanup before any model call
# - list from the chat UI or "chicken, rice" string from the search bar
# - trim, drop blanks, keep order (order is what the user typed)

from __future__ import annotations
import re
import unicodedata
from typing import Iterable, List, Union

from makeafood.core.errors import InvalidInput

_SPLIT_RE = re.compile(r"[,\n]")


def _nfkc(s: str) -> str:
    return unicodedata.normalize("NFKC", s or "")


def split_ingredients(raw: Union[str, Iterable[str], None]) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return _SPLIT_RE.split(raw)
    return [x for x in raw if isinstance(x, str)]


def clean_ingredients(raw: Union[str, Iterable[str], None]) -> List[str]:
    """
    Normalize the ingredient input to a non-empty list of trimmed strings.
    Raises InvalidInput when nothing usable is left.
    """
    items = [_nfkc(s).strip() for s in split_ingredients(raw)]
    items = [s for s in items if s]
    if not items:
        raise InvalidInput("No ingredients provided")
    return items
