import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from careerpath.core.aps import ApsPolicy
from careerpath.core.models import (
    CareerRequirement,
    EligibilityStatus,
    RequirementSource,
    UniversityEligibility,
    UniversityStatus,
    UserPreferences,
)

logger = logging.getLogger(__name__)

COMMON_WORDS = {"university", "of", "the"}
APS_CLOSE_MARGIN = -3

_STATUS_ORDER = {
    UniversityStatus.QUALIFIED: 0,
    UniversityStatus.CLOSE: 1,
    UniversityStatus.NOT_ELIGIBLE: 2,
}

_FROM_SUBJECT_STATUS = {
    EligibilityStatus.QUALIFIED: UniversityStatus.QUALIFIED,
    EligibilityStatus.CLOSE: UniversityStatus.CLOSE,
    EligibilityStatus.NEEDS_IMPROVEMENT: UniversityStatus.NOT_ELIGIBLE,
}


def normalize_institution_name(name: str) -> str:
    collapsed = re.sub(r"\s+", " ", (name or "").strip().lower())
    words = [w for w in collapsed.split(" ") if w and w not in COMMON_WORDS]
    return " ".join(words) or collapsed


def dedupe_sources(sources: List[RequirementSource], default_aps: Optional[int] = None) -> List[Tuple[RequirementSource, int]]:
    """One record per institution; duplicates keep the lower APS requirement."""
    kept: Dict[str, Tuple[RequirementSource, int]] = {}
    for src in sources:
        if not src.institution:
            continue
        aps_required = src.aps or default_aps or 0
        key = normalize_institution_name(src.institution)
        if key in kept:
            if aps_required < kept[key][1]:
                logger.debug("Duplicate institution %r: keeping APS %s over %s", src.institution, aps_required, kept[key][1])
                kept[key] = (src, aps_required)
            continue
        kept[key] = (src, aps_required)
    return list(kept.values())


def aps_status(difference: int) -> UniversityStatus:
    if difference >= 0:
        return UniversityStatus.QUALIFIED
    if difference >= APS_CLOSE_MARGIN:
        return UniversityStatus.CLOSE
    return UniversityStatus.NOT_ELIGIBLE


def combine(aps: UniversityStatus, subjects: UniversityStatus) -> UniversityStatus:
    if aps is UniversityStatus.QUALIFIED and subjects is UniversityStatus.QUALIFIED:
        return UniversityStatus.QUALIFIED
    hopeful = (UniversityStatus.QUALIFIED, UniversityStatus.CLOSE)
    if aps in hopeful or subjects in hopeful:
        return UniversityStatus.CLOSE
    return UniversityStatus.NOT_ELIGIBLE


class UniversityClassifier:
    def __init__(self, engine, aps_policy: Optional[ApsPolicy] = None):
        self.engine = engine
        self.aps_policy = aps_policy

    def policy_for(self, country: str) -> ApsPolicy:
        if self.aps_policy is not None:
            return self.aps_policy
        return ApsPolicy(self.engine.repo.get_subject_catalog(country).policy)

    def user_aps(self, grades: Mapping[str, Any], country: str) -> int:
        resolver = self.engine.resolver_for(country)
        return self.policy_for(country).compute_aps(grades, resolver)

    def classify(self, grades: Mapping[str, Any], requirement: CareerRequirement,
                 preferences: Optional[UserPreferences] = None) -> List[UniversityEligibility]:
        country = requirement.country
        user_aps = self.user_aps(grades, country)
        subject_result = self.engine.evaluate(grades, requirement.min_grades, country, preferences)
        subject_status = _FROM_SUBJECT_STATUS[subject_result.status]

        out: List[UniversityEligibility] = []
        for src, aps_required in dedupe_sources(requirement.sources, requirement.aps):
            difference = user_aps - aps_required
            a_status = aps_status(difference)
            out.append(UniversityEligibility(
                institution=src.institution,
                aps_required=aps_required,
                user_aps=user_aps,
                status=combine(a_status, subject_status),
                aps_difference=difference,
                qualification_level=requirement.level,
                aps_status=a_status,
                subject_status=subject_status,
                url=src.url,
                notes=src.notes,
                verified_date=src.verified_date,
            ))

        out.sort(key=lambda u: (_STATUS_ORDER[u.status], u.aps_required))
        return out

    def classify_career(self, grades: Mapping[str, Any], career_name: str, country: str,
                        preferences: Optional[UserPreferences] = None) -> Dict[str, List[UniversityEligibility]]:
        tiers = self.engine.repo.get_career_requirements(career_name, country)
        return {tier.level: self.classify(grades, tier, preferences) for tier in tiers}
