from typing import Any, Dict, List, Mapping, Optional, Tuple

from careerpath.core.grades import build_grade_sheet, coerce_grade
from careerpath.core.models import ApsBreakdown

DEFAULT_BANDS: List[Tuple[float, int]] = [
    (80, 7),
    (70, 6),
    (60, 5),
    (50, 4),
    (40, 3),
    (30, 2),
]


class ApsPolicy:
    """
    Admission Point Score (South African NSC style):
      - the Life Orientation equivalent is set aside,
      - the best `counted_subjects` remaining grades are banded and summed
        (80+ -> 7, 70+ -> 6, 60+ -> 5, 50+ -> 4, 40+ -> 3, 30+ -> 2, else 1),
      - the Life Orientation equivalent, when entered, adds its band value
        capped at `life_orientation_cap`.
    All knobs can be overridden from the country's policy.json.
    """

    def __init__(self, policy_cfg: Optional[Dict[str, Any]] = None):
        cfg = (policy_cfg or {}).get("aps", policy_cfg or {})
        self.bands = sorted(
            [(float(lo), int(pts)) for lo, pts in cfg.get("bands", DEFAULT_BANDS)],
            reverse=True,
        )
        self.floor_points = int(cfg.get("floorPoints", 1))
        self.counted_subjects = int(cfg.get("countedSubjects", 6))
        self.life_orientation = cfg.get("lifeOrientationSubject", "LifeOrientation")
        self.life_orientation_cap = int(cfg.get("lifeOrientationCap", 6))

    def band(self, percentage: float) -> int:
        for lower, points in self.bands:
            if percentage >= lower:
                return points
        return self.floor_points

    def _is_life_orientation(self, subject: str, resolver) -> bool:
        name = resolver.normalize(subject) if resolver is not None else subject
        target = self.life_orientation.replace(" ", "").lower()
        return name.replace(" ", "").lower() == target

    def compute_aps_with_breakdown(self, grades: Mapping[str, Any], resolver=None) -> ApsBreakdown:
        if resolver is not None:
            # one slot per subject, however many spellings were entered
            grades = build_grade_sheet(grades, resolver)
        others: List[Tuple[str, float]] = []
        lo_grade: Optional[float] = None
        for subject, raw in (grades or {}).items():
            grade = coerce_grade(raw)
            if grade is None:
                continue
            if self._is_life_orientation(subject, resolver):
                lo_grade = grade if lo_grade is None else max(lo_grade, grade)
            else:
                others.append((subject, grade))

        others.sort(key=lambda item: item[1], reverse=True)
        counted = [
            {"subject": subject, "grade": grade, "points": self.band(grade)}
            for subject, grade in others[: self.counted_subjects]
        ]
        total = sum(c["points"] for c in counted)

        lo_entry = None
        if lo_grade is not None:
            points = min(self.band(lo_grade), self.life_orientation_cap)
            lo_entry = {"subject": self.life_orientation, "grade": lo_grade, "points": points}
            total += points

        return ApsBreakdown(total=int(total), counted=counted, life_orientation=lo_entry)

    def compute_aps(self, grades: Mapping[str, Any], resolver=None) -> int:
        return self.compute_aps_with_breakdown(grades, resolver).total
