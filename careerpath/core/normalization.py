import logging
from typing import Any, Dict, Mapping, Optional

from careerpath.core.grades import coerce_grade
from careerpath.core.models import EitherOrGroup, SubjectCatalog

logger = logging.getLogger(__name__)

# Cross-curriculum spellings used when the country catalog has no entry.
# Matched case-insensitively.
GENERIC_ALIASES: Dict[str, str] = {
    "Mathematics": "Math",
    "Maths": "Math",
    "Mathematical Literacy": "MathLiteracy",
    "Math Literacy": "MathLiteracy",
    "English Home Language": "English",
    "English (Home Language)": "English",
    "English HL": "English",
    "English First Additional Language": "EnglishFAL",
    "English (First Additional Language)": "EnglishFAL",
    "English FAL": "EnglishFAL",
    "Life Orientation": "LifeOrientation",
    "Physical Sciences": "Physics",
    "Physical Science": "Physics",
    "Life Sciences": "Biology",
    "Life Science": "Biology",
    "Computer Applications Technology": "CAT",
    "Computer Applications Tech": "CAT",
    "Information Technology": "IT",
    "Computer": "IT",
    "Computers": "IT",
}

_GENERIC_LOWER = {k.lower(): v for k, v in GENERIC_ALIASES.items()}

# IT and CAT stand in for each other wherever either one is asked for.
_SUBSTITUTES = {"IT": "CAT", "CAT": "IT"}


class SubjectResolver:
    """
    Resolves subject spellings and grade lookups for one country catalog.

    normalize() is total: unknown names come back unchanged.
    grade_for() / is_entered() try, in order: the exact key, the normalized
    key, a case-insensitive scan over normalized grade keys, the IT/CAT
    substitution and finally the siblings of the subject's either/or group.
    """

    def __init__(self, catalog: SubjectCatalog):
        self.catalog = catalog
        self._by_standard_lower = {s.standard_name.lower(): s.standard_name for s in catalog.subjects}
        self._by_display = {s.display_name: s.standard_name for s in catalog.subjects}
        self._by_display_lower = {s.display_name.lower(): s.standard_name for s in catalog.subjects}
        self._mandatory = set(catalog.mandatory)

    @property
    def country(self) -> str:
        return self.catalog.country

    # ---------- names ----------

    def normalize(self, raw_name: str) -> str:
        if not raw_name:
            return raw_name
        if raw_name in self.catalog.aliases:
            return self.catalog.aliases[raw_name]
        lower = raw_name.lower()
        if lower in self._by_standard_lower:
            return self._by_standard_lower[lower]
        if raw_name in self._by_display:
            return self._by_display[raw_name]
        if lower in self._by_display_lower:
            return self._by_display_lower[lower]
        if lower in _GENERIC_LOWER:
            return _GENERIC_LOWER[lower]
        return raw_name

    def display_name(self, subject: str) -> str:
        entry = self.catalog.find(self.normalize(subject))
        return entry.display_name if entry else subject

    def display_label(self, label: str) -> str:
        """Display form of a rule label; either/or labels ("Math/MathLiteracy") are rendered per member."""
        return "/".join(self.display_name(part) for part in label.split("/"))

    def group_for(self, subject: str) -> Optional[EitherOrGroup]:
        name = self.normalize(subject)
        for group in self.catalog.either_or_groups:
            if name in group.subjects:
                return group
        return None

    def is_mandatory(self, subject: str) -> bool:
        return self.normalize(subject) in self._mandatory

    # ---------- grade lookup ----------

    def _direct(self, grades: Mapping[str, Any], subject: str) -> Optional[float]:
        value = grades.get(subject)
        if value is not None:
            return coerce_grade(value)

        normalized = self.normalize(subject)
        value = grades.get(normalized)
        if value is not None:
            return coerce_grade(value)

        target = normalized.lower()
        for key, value in grades.items():
            if value is None:
                continue
            if key.lower() == target or self.normalize(key).lower() == target:
                return coerce_grade(value)
        return None

    def _with_substitute(self, grades: Mapping[str, Any], subject: str) -> Optional[float]:
        found = self._direct(grades, subject)
        if found is not None:
            return found
        substitute = _SUBSTITUTES.get(self.normalize(subject))
        if substitute is not None:
            return self._direct(grades, substitute)
        return None

    def lookup(self, grades: Mapping[str, Any], subject: str, include_group: bool = True) -> Optional[float]:
        """Grade for subject, or None when nothing that counts for it was entered."""
        if not grades or not subject:
            return None
        found = self._with_substitute(grades, subject)
        if found is not None or not include_group:
            return found
        group = self.group_for(subject)
        if group is None:
            return None
        normalized = self.normalize(subject)
        for sibling in group.subjects:
            if sibling == normalized:
                continue
            found = self._with_substitute(grades, sibling)
            if found is not None:
                logger.debug("%s resolved through either/or sibling %s", subject, sibling)
                return found
        return None

    def grade_for(self, grades: Mapping[str, Any], subject: str) -> float:
        found = self.lookup(grades, subject)
        return 0 if found is None else found

    def is_entered(self, grades: Mapping[str, Any], subject: str) -> bool:
        return self.lookup(grades, subject) is not None
