from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Any


class EligibilityStatus(str, Enum):
    QUALIFIED = "qualified"
    CLOSE = "close"
    NEEDS_IMPROVEMENT = "needs-improvement"


class UniversityStatus(str, Enum):
    QUALIFIED = "qualified"
    CLOSE = "close"
    NOT_ELIGIBLE = "not-eligible"


@dataclass(frozen=True)
class SubjectMapping:
    standard_name: str
    display_name: str
    required: bool = False


@dataclass(frozen=True)
class EitherOrGroup:
    subjects: List[str]
    description: str = ""
    min_required: int = 1
    max_allowed: int = 1

    @property
    def label(self) -> str:
        return "/".join(self.subjects)


@dataclass
class SubjectCatalog:
    country: str
    subjects: List[SubjectMapping] = field(default_factory=list)
    aliases: Dict[str, str] = field(default_factory=dict)
    either_or_groups: List[EitherOrGroup] = field(default_factory=list)
    mandatory_subjects: List[str] = field(default_factory=list)
    policy: Dict[str, Any] = field(default_factory=dict)

    def find(self, standard_name: str) -> Optional[SubjectMapping]:
        for s in self.subjects:
            if s.standard_name == standard_name:
                return s
        return None

    @property
    def mandatory(self) -> List[str]:
        # catalog "required" entries first, then the explicit list
        out = [s.standard_name for s in self.subjects if s.required]
        for name in self.mandatory_subjects:
            if name not in out:
                out.append(name)
        return out


@dataclass(frozen=True)
class RequirementSource:
    institution: Optional[str] = None
    url: Optional[str] = None
    aps: Optional[int] = None
    notes: Optional[str] = None
    verified_date: Optional[str] = None


@dataclass
class QualificationLevel:
    level: str  # Degree / BTech / Diploma / Certificate
    min_grades: Dict[str, float]
    aps: Optional[int] = None
    nqf_level: Optional[int] = None
    notes: Optional[str] = None
    pathway: Optional[str] = None
    sources: List[RequirementSource] = field(default_factory=list)


@dataclass
class Career:
    name: str
    min_grades: Dict[str, float]
    category: Optional[str] = None
    country_baselines: Dict[str, Dict[str, float]] = field(default_factory=dict)
    qualification_levels: Dict[str, List[QualificationLevel]] = field(default_factory=dict)
    verification_status: Optional[str] = None
    last_verified: Optional[str] = None


@dataclass
class CareerRequirement:
    career: str
    country: str
    level: str
    min_grades: Dict[str, float]
    aps: Optional[int] = None
    nqf_level: Optional[int] = None
    sources: List[RequirementSource] = field(default_factory=list)


@dataclass
class UserPreferences:
    enforce_compulsory_subjects: bool = True


@dataclass(frozen=True)
class EligibilityResult:
    status: EligibilityStatus
    match_score: int
    missing_subjects: List[str]
    close_subjects: List[str]
    met_requirements: int = 0
    total_requirements: int = 0


@dataclass(frozen=True)
class EligibleCareer:
    career: Career
    requirement: Dict[str, float]
    result: EligibilityResult

    @property
    def status(self) -> EligibilityStatus:
        return self.result.status

    @property
    def match_score(self) -> int:
        return self.result.match_score


@dataclass(frozen=True)
class ApsBreakdown:
    total: int
    counted: List[Dict[str, Any]]
    life_orientation: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class UniversityEligibility:
    institution: str
    aps_required: int
    user_aps: int
    status: UniversityStatus
    aps_difference: int
    qualification_level: str
    aps_status: UniversityStatus
    subject_status: UniversityStatus
    url: Optional[str] = None
    notes: Optional[str] = None
    verified_date: Optional[str] = None
