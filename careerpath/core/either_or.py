"""
Either/or subject groups.

A group such as Math / MathLiteracy lets a requirement written against any
member be satisfied by the best grade among the members the student actually
entered. The student is held to the least demanding requirement among those
entered members.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from careerpath.core.models import EitherOrGroup


@dataclass(frozen=True)
class GroupResolution:
    group: EitherOrGroup
    entered: List[str]
    best_grade: Optional[float]
    min_required: Optional[float]

    @property
    def label(self) -> str:
        return self.group.label

    @property
    def attempted(self) -> bool:
        return bool(self.entered)


def partition(requirements: Mapping[str, float], resolver) -> Tuple[List[EitherOrGroup], List[str]]:
    """
    Split normalized requirement keys into the declared groups they touch
    (catalog order) and the remaining standalone subjects (requirement order).
    Every member of a touched group is treated as processed.
    """
    groups: List[EitherOrGroup] = []
    processed = set()
    for group in resolver.catalog.either_or_groups:
        if any(s in requirements for s in group.subjects):
            groups.append(group)
            processed.update(group.subjects)
    standalone = [s for s in requirements if s not in processed]
    return groups, standalone


def resolve_group(group: EitherOrGroup, requirements: Mapping[str, float],
                  grades: Mapping[str, Any], resolver) -> GroupResolution:
    entered: List[str] = []
    best: Optional[float] = None
    for member in group.subjects:
        grade = resolver.lookup(grades, member, include_group=False)
        if grade is None:
            continue
        entered.append(member)
        if best is None or grade > best:
            best = grade

    if not entered:
        return GroupResolution(group=group, entered=[], best_grade=None, min_required=None)

    values: Dict[str, float] = {s: requirements[s] for s in group.subjects if s in requirements}
    candidates = [values[s] for s in entered if s in values]
    if not candidates:
        # the entered member carries no requirement of its own; the
        # requirement written against its siblings applies
        candidates = list(values.values())
    return GroupResolution(group=group, entered=entered, best_grade=best, min_required=min(candidates))
