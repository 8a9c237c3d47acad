import logging
import math
from typing import Any, Dict, List, Mapping, Optional

from careerpath.core.errors import UnknownCareerError
from careerpath.core.models import (
    CareerRequirement,
    EligibilityResult,
    EligibilityStatus,
    EligibleCareer,
    UserPreferences,
)
from careerpath.core.normalization import SubjectResolver
from careerpath.core.repositories import CatalogRepository, requirements_for
from careerpath.core.rule_factory import RuleFactory
from careerpath.core.rules import Outcome, RuleResult

logger = logging.getLogger(__name__)

NO_REQUIREMENTS = "No requirements defined"
CLOSE_SCORE_THRESHOLD = 60


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def summarize(results: List[RuleResult]) -> EligibilityResult:
    """Fold rule outcomes into a status and match score. Skipped rules do not count."""
    missing: List[str] = []
    close: List[str] = []
    met = 0
    total = 0
    for rr in results:
        if not rr.scored:
            continue
        total += 1
        if rr.outcome is Outcome.MET:
            met += 1
        elif rr.outcome is Outcome.CLOSE:
            close.append(rr.label)
        else:
            missing.append(rr.label)

    score = _round_half_up(100.0 * met / total) if total else 0

    if total == 0:
        status = EligibilityStatus.NEEDS_IMPROVEMENT
    elif not missing and not close:
        status = EligibilityStatus.QUALIFIED
    elif not missing:
        status = EligibilityStatus.CLOSE
    elif score >= CLOSE_SCORE_THRESHOLD:
        status = EligibilityStatus.CLOSE
    else:
        status = EligibilityStatus.NEEDS_IMPROVEMENT

    return EligibilityResult(
        status=status,
        match_score=score,
        missing_subjects=missing,
        close_subjects=close,
        met_requirements=met,
        total_requirements=total,
    )


class EligibilityEngine:
    def __init__(self, repo: CatalogRepository, preferences: Optional[UserPreferences] = None):
        self.repo = repo
        self.preferences = preferences or UserPreferences()

    def resolver_for(self, country: str) -> SubjectResolver:
        return SubjectResolver(self.repo.get_subject_catalog(country))

    def _rule_results(self, grades, min_grades, country, preferences) -> List[RuleResult]:
        resolver = self.resolver_for(country)
        factory = RuleFactory(resolver, preferences or self.preferences)
        return [rule.evaluate(grades or {}) for rule in factory.from_requirements(min_grades)]

    def evaluate(self, grades: Mapping[str, Any], min_grades: Mapping[str, float], country: str,
                 preferences: Optional[UserPreferences] = None) -> EligibilityResult:
        if not min_grades:
            return EligibilityResult(
                status=EligibilityStatus.NEEDS_IMPROVEMENT,
                match_score=0,
                missing_subjects=[NO_REQUIREMENTS],
                close_subjects=[],
            )
        results = self._rule_results(grades, min_grades, country, preferences)
        for rr in results:
            logger.debug(rr.explanation)
        return summarize(results)

    def improvements(self, grades: Mapping[str, Any], min_grades: Mapping[str, float], country: str,
                     preferences: Optional[UserPreferences] = None) -> Dict[str, int]:
        if not min_grades:
            return {}
        out: Dict[str, int] = {}
        for rr in self._rule_results(grades, min_grades, country, preferences):
            if rr.scored and not rr.passed:
                out[rr.label] = rr.deficit
        return out

    # ---------- career catalog ----------

    def requirement_for(self, career_name: str, country: str, level: Optional[str] = None) -> CareerRequirement:
        tiers = self.repo.get_career_requirements(career_name, country)
        if level is None:
            return tiers[0]
        for tier in tiers:
            if tier.level.lower() == level.lower():
                return tier
        raise UnknownCareerError(f"{career_name} ({level})", country)

    def evaluate_career(self, grades: Mapping[str, Any], career_name: str, country: str,
                        level: Optional[str] = None,
                        preferences: Optional[UserPreferences] = None) -> EligibilityResult:
        req = self.requirement_for(career_name, country, level)
        return self.evaluate(grades, req.min_grades, country, preferences)

    def evaluate_careers(self, grades: Mapping[str, Any], country: str,
                         preferences: Optional[UserPreferences] = None) -> List[EligibleCareer]:
        if not grades:
            return []
        # fail before touching careers if the country itself is unknown
        self.repo.get_subject_catalog(country)
        out: List[EligibleCareer] = []
        for career in self.repo.list_careers():
            primary = requirements_for(career, country)[0]
            result = self.evaluate(grades, primary.min_grades, country, preferences)
            out.append(EligibleCareer(career=career, requirement=primary.min_grades, result=result))
        out.sort(key=lambda ec: (ec.status is not EligibilityStatus.QUALIFIED, -ec.match_score))
        return out

    def qualified_careers(self, grades, country, preferences=None) -> List[EligibleCareer]:
        return [ec for ec in self.evaluate_careers(grades, country, preferences)
                if ec.status is EligibilityStatus.QUALIFIED]

    def close_careers(self, grades, country, preferences=None) -> List[EligibleCareer]:
        return [ec for ec in self.evaluate_careers(grades, country, preferences)
                if ec.status is EligibilityStatus.CLOSE]


def group_by_category(careers: List[EligibleCareer]) -> Dict[str, List[EligibleCareer]]:
    grouped: Dict[str, List[EligibleCareer]] = {}
    for ec in careers:
        grouped.setdefault(ec.career.category or "Other", []).append(ec)
    for category in grouped:
        grouped[category].sort(key=lambda ec: -ec.match_score)
    return dict(sorted(grouped.items()))
