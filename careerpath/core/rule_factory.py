import logging
from typing import Dict, List, Mapping, Optional

from careerpath.core.either_or import partition
from careerpath.core.models import UserPreferences
from careerpath.core.rules import EitherOrRule, RequirementRule, SubjectRequirementRule

logger = logging.getLogger(__name__)


class RuleFactory:
    """
    Build the requirement rules for one minimum-grade map.
    Either/or groups come first (catalog order), then standalone subjects
    in the order the requirement lists them.
    """

    def __init__(self, resolver, preferences: Optional[UserPreferences] = None) -> None:
        self.resolver = resolver
        self.preferences = preferences or UserPreferences()

    def normalize_requirements(self, min_grades: Mapping[str, float]) -> Dict[str, float]:
        out: Dict[str, float] = {}
        for name, value in (min_grades or {}).items():
            if value is None:
                continue
            key = self.resolver.normalize(name)
            if key in out:
                # two spellings of the same subject: the lower bar wins
                value = min(out[key], value)
            out[key] = value
        return out

    def _skip_mandatory(self, subjects: List[str]) -> bool:
        if self.preferences.enforce_compulsory_subjects:
            return False
        return all(self.resolver.is_mandatory(s) for s in subjects)

    def from_requirements(self, min_grades: Mapping[str, float]) -> List[RequirementRule]:
        reqs = self.normalize_requirements(min_grades)
        groups, standalone = partition(reqs, self.resolver)

        rules: List[RequirementRule] = []
        for group in groups:
            if self._skip_mandatory(group.subjects):
                logger.debug("Skipping compulsory group %s", group.label)
                continue
            rules.append(EitherOrRule(self.resolver, group, reqs))
        for subject in standalone:
            if self._skip_mandatory([subject]):
                logger.debug("Skipping compulsory subject %s", subject)
                continue
            rules.append(SubjectRequirementRule(self.resolver, subject, reqs[subject]))
        return rules
