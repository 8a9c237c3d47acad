import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Optional, Protocol

from careerpath.core.either_or import resolve_group
from careerpath.core.models import EitherOrGroup

# a grade within 10% of the target is "close"
CLOSE_RATIO = 0.9


class Outcome(str, Enum):
    MET = "met"
    CLOSE = "close"
    MISSING = "missing"
    SKIPPED = "skipped"  # not attempted: invisible to scoring


def classify(current: float, required: float) -> Outcome:
    if current >= required:
        return Outcome.MET
    if current >= required * CLOSE_RATIO:
        return Outcome.CLOSE
    return Outcome.MISSING


@dataclass(frozen=True)
class RuleResult:
    outcome: Outcome
    label: str
    explanation: str
    current: Optional[float] = None
    required: Optional[float] = None

    @property
    def passed(self) -> bool:
        return self.outcome is Outcome.MET

    @property
    def scored(self) -> bool:
        return self.outcome is not Outcome.SKIPPED

    @property
    def deficit(self) -> int:
        if self.outcome in (Outcome.CLOSE, Outcome.MISSING):
            # whole points still to gain
            return math.ceil(self.required - self.current)
        return 0


class RequirementRule(Protocol):
    label: str
    subjects: List[str]

    def evaluate(self, grades: Mapping[str, Any]) -> RuleResult: ...


class SubjectRequirementRule:
    def __init__(self, resolver, subject: str, min_grade: float):
        self.resolver = resolver
        self.subject = subject
        self.min_grade = min_grade
        self.label = subject
        self.subjects = [subject]

    def evaluate(self, grades: Mapping[str, Any]) -> RuleResult:
        if not self.resolver.is_entered(grades, self.subject):
            return RuleResult(Outcome.SKIPPED, self.label, f"{self.subject}: not attempted")
        current = self.resolver.grade_for(grades, self.subject)
        outcome = classify(current, self.min_grade)
        if outcome is Outcome.MET:
            exp = f"{self.subject} OK (score={current}, required={self.min_grade})"
        else:
            exp = f"{self.subject}: score {current} < required {self.min_grade} ({outcome.value})"
        return RuleResult(outcome, self.label, exp, current=current, required=self.min_grade)


class EitherOrRule:
    def __init__(self, resolver, group: EitherOrGroup, requirements: Mapping[str, float]):
        self.resolver = resolver
        self.group = group
        self.requirements = {s: requirements[s] for s in group.subjects if s in requirements}
        self.label = group.label
        self.subjects = list(group.subjects)

    def evaluate(self, grades: Mapping[str, Any]) -> RuleResult:
        res = resolve_group(self.group, self.requirements, grades, self.resolver)
        if not res.attempted:
            return RuleResult(Outcome.SKIPPED, self.label, f"{self.label}: no member attempted")
        outcome = classify(res.best_grade, res.min_required)
        entered = ", ".join(res.entered)
        exp = f"{self.label}: best={res.best_grade} of [{entered}] vs required={res.min_required} ({outcome.value})"
        return RuleResult(outcome, self.label, exp, current=res.best_grade, required=res.min_required)
