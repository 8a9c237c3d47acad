"""
Grade ingestion.

Raw grade payloads arrive with arbitrary subject spellings and loosely typed
values. Everything is coerced and normalized here once, so the scoring code
never has to second-guess a value.
"""
import logging
import math
from typing import Any, Dict, List, Mapping, NewType, Optional

logger = logging.getLogger(__name__)

SubjectKey = NewType("SubjectKey", str)


def coerce_grade(value: Any) -> Optional[float]:
    """
    None -> None (subject not entered).
    Numbers are used as-is, out-of-range values included.
    Numeric-looking strings ("65", " 72.5 ", "80%") are parsed.
    Anything else (bools, NaN, "abc") counts as 0.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return 0.0
        return value
    if isinstance(value, str):
        text = value.strip().rstrip("%").strip()
        if not text:
            return 0.0
        try:
            parsed = float(text)
        except ValueError:
            return 0.0
        if math.isnan(parsed):
            return 0.0
        return int(parsed) if parsed.is_integer() else parsed
    return 0.0


def build_grade_sheet(raw: Mapping[str, Any], resolver) -> Dict[SubjectKey, float]:
    sheet: Dict[SubjectKey, float] = {}
    for name, value in (raw or {}).items():
        grade = coerce_grade(value)
        if grade is None:
            continue
        key = SubjectKey(resolver.normalize(name))
        if key in sheet:
            logger.debug("Duplicate grade for %s (from %r); keeping the higher one", key, name)
            grade = max(sheet[key], grade)
        sheet[key] = grade
    return sheet


def missing_mandatory(grades: Mapping[str, Any], resolver) -> List[str]:
    return [s for s in resolver.catalog.mandatory if not resolver.is_entered(grades, s)]
