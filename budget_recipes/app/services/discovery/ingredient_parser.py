"""Ingredient line and servings parsing (French and English)."""

import logging
import math
import re
from decimal import Decimal, InvalidOperation
from typing import Callable, List, Optional, Tuple

from budget_recipes.app.services.discovery.constants import FRACTION_CHARS, FRACTION_MAP, UNIT_VOCABULARY
from budget_recipes.app.services.discovery.models import Ingredient

logger = logging.getLogger(__name__)

MAX_SERVINGS = 50

QTY = rf"(?:\d+\s+\d+/\d+|\d+/\d+|\d*[{FRACTION_CHARS}]|\d+(?:[.,]\d+)?)"
CONNECTOR = r"\s*(?:\bde\s+|\bd['’]\s*|\bof\s+)"

QTY_UNIT_OF_NAME_RE = re.compile(rf"^({QTY})\s*(.+?){CONNECTOR}(.+)$", re.I)
QTY_REST_RE = re.compile(rf"^({QTY})\s*(.+)$", re.I)
UNIT_OF_NAME_RE = re.compile(rf"^(.+?){CONNECTOR}(.+)$", re.I)

_SORTED_UNITS = sorted(UNIT_VOCABULARY, key=len, reverse=True)


def clean_text(text: str) -> str:
    """Normalize whitespace in text."""
    return re.sub(r"\s+", " ", text or "").strip()


def normalize_fraction_display(qty: Optional[str]) -> Optional[str]:
    """Rewrite unicode fractions as ascii ("1½" -> "1 1/2")."""
    if not qty:
        return qty
    s = re.sub(rf"(\d)([{FRACTION_CHARS}])", r"\1 \2", qty)
    for k, v in FRACTION_MAP.items():
        s = s.replace(k, v)
    return clean_text(s) or None


def parse_quantity(raw: Optional[str]) -> Optional[Decimal]:
    """Numeric value of a quantity token: "2", "2,5", "1/2", "1 1/2", "½"."""
    if raw is None:
        return None
    value = normalize_fraction_display(raw.strip())
    if not value:
        return None
    value = value.replace(",", ".")

    try:
        if "/" not in value and " " not in value:
            return Decimal(value)
    except InvalidOperation:
        return None

    try:
        if " " in value:
            whole_part, frac_part = value.split(" ", 1)
            whole = Decimal(whole_part)
            num_str, denom_str = frac_part.split("/", 1)
            denom = Decimal(denom_str)
            if denom == 0:
                return None
            return whole + (Decimal(num_str) / denom)
        num_str, denom_str = value.split("/", 1)
        denom = Decimal(denom_str)
        if denom == 0:
            return None
        return Decimal(num_str) / denom
    except (InvalidOperation, ValueError):
        return None


def is_unit_phrase(phrase: str) -> bool:
    """
    Whether ``phrase`` names a unit of measure.

    Matches in both directions: the phrase contains a known unit as a whole
    word ("grosse tasse"), or the phrase is a fragment of a known unit
    ("cuill."). One- and two-letter units only match exactly.
    """
    p = clean_text(phrase).lower()
    if not p:
        return False
    if p in UNIT_VOCABULARY:
        return True
    for unit in _SORTED_UNITS:
        if len(unit) <= 2:
            continue
        if re.search(rf"(?<!\w){re.escape(unit)}(?!\w)", p):
            return True
        if len(p) > 2 and p.rstrip(".") in unit:
            return True
    return False


def _leading_unit(rest: str) -> Optional[Tuple[str, str]]:
    """Longest 1-4 word prefix of ``rest`` that is a unit, with a non-empty remainder."""
    words = rest.split(" ")
    for size in range(min(4, len(words) - 1), 0, -1):
        phrase = " ".join(words[:size])
        if is_unit_phrase(phrase):
            return phrase, " ".join(words[size:])
    return None


def parse_ingredient(line: str) -> Optional[Ingredient]:
    """
    Split a free-text ingredient line into name, quantity and unit.

    Returns None for lines shorter than two characters. Shapes tried in order:
    "qty unit of name", "qty unit name", "qty name", "unit of name" (implied
    quantity 1); anything else is all name.
    """
    raw = clean_text(line)
    if len(raw) < 2:
        return None

    m = QTY_UNIT_OF_NAME_RE.match(raw)
    if m:
        qty, phrase, name = m.group(1), clean_text(m.group(2)), clean_text(m.group(3))
        if is_unit_phrase(phrase) and name:
            return Ingredient(name=name, quantity=normalize_fraction_display(qty), unit=phrase)

    m = QTY_REST_RE.match(raw)
    if m:
        qty, rest = m.group(1), clean_text(m.group(2))
        split = _leading_unit(rest)
        if split:
            unit, name = split
            return Ingredient(name=name, quantity=normalize_fraction_display(qty), unit=unit)
        return Ingredient(name=rest, quantity=normalize_fraction_display(qty))

    m = UNIT_OF_NAME_RE.match(raw)
    if m and is_unit_phrase(m.group(1)) and clean_text(m.group(2)):
        return Ingredient(name=clean_text(m.group(2)), quantity="1", unit=clean_text(m.group(1)))

    return Ingredient(name=raw)


def parse_ingredients(lines) -> List[Ingredient]:
    parsed: List[Ingredient] = []
    for raw in lines or []:
        if not isinstance(raw, str):
            logger.debug("Skipping non-string ingredient %r", raw)
            continue
        ingredient = parse_ingredient(raw)
        if ingredient:
            parsed.append(ingredient)
    return parsed


# Servings

_PEOPLE = r"(?:personnes?|portions?|servings?|people|persons?|pers\.?)"


def _midpoint(m: re.Match) -> float:
    return (int(m.group(1)) + int(m.group(2))) / 2


def _litres(m: re.Match) -> float:
    return float(m.group(1).replace(",", ".")) * 4


SERVINGS_PATTERNS: List[Tuple[re.Pattern, Callable[[re.Match], float]]] = [
    (re.compile(rf"\b(?:pour|for)\s+(\d+)\s*{_PEOPLE}", re.I), lambda m: int(m.group(1))),
    (re.compile(rf"\b(\d+)\s*(?:-|–|à|a|to)\s*(\d+)\s*{_PEOPLE}", re.I), _midpoint),
    (re.compile(r"\b(\d+)\s*(?:portions?|servings?|people|personnes?)\b", re.I), lambda m: int(m.group(1))),
    (re.compile(r"\b(?:serves?|sert)\s*:?\s*(\d+)", re.I), lambda m: int(m.group(1))),
    (re.compile(r"\(\s*(\d+)\s*(?:pers\.?|pors?\.?|portions?)\s*\)", re.I), lambda m: int(m.group(1))),
    (re.compile(r"\b(\d+)\s*(?:pers|port)\.?(?!\w)", re.I), lambda m: int(m.group(1))),
    (re.compile(r"\b(?:yields?|rendement)\s*:?\s*(\d+)", re.I), lambda m: int(m.group(1))),
    (
        re.compile(r"\b(?:plat de|dish of)\s*(\d+(?:[.,]\d+)?)\s*(?:litres?|liters?|l)\b", re.I),
        _litres,
    ),
]


def _valid_servings(value: float) -> Optional[int]:
    rounded = int(math.floor(value + 0.5))
    if 0 < rounded <= MAX_SERVINGS:
        return rounded
    return None


def parse_servings_from_text(text: Optional[str]) -> Optional[int]:
    """First valid servings count found in free text; out-of-range values fall through."""
    if not text:
        return None
    for pattern, convert in SERVINGS_PATTERNS:
        m = pattern.search(text)
        if not m:
            continue
        servings = _valid_servings(convert(m))
        if servings is not None:
            return servings
    return None


def parse_servings(value) -> Optional[int]:
    """Servings from a structured yield value (number, string or list)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _valid_servings(value)
    if isinstance(value, list):
        for item in value:
            servings = parse_servings(item)
            if servings is not None:
                return servings
        return None
    if isinstance(value, str):
        servings = parse_servings_from_text(value)
        if servings is not None:
            return servings
        match = re.search(r"\d+", value)
        if match:
            return _valid_servings(int(match.group()))
    return None
