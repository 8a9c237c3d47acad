import logging
import os
import time
from concurrent.futures import Executor
from typing import Any, Callable, Dict, List, Optional, Protocol

from careerpath.core import loaders
from careerpath.core.cache import ReadThroughCache
from careerpath.core.errors import CatalogUnavailableError, UnknownCareerError, UnknownCountryError
from careerpath.core.models import (
    Career,
    CareerRequirement,
    EitherOrGroup,
    QualificationLevel,
    RequirementSource,
    SubjectCatalog,
    SubjectMapping,
)

logger = logging.getLogger(__name__)


class CatalogRepository(Protocol):
    def list_countries(self) -> List[Dict[str, Any]]:
        ...

    def get_subject_catalog(self, country: str) -> SubjectCatalog:
        ...

    def list_careers(self) -> List[Career]:
        ...

    def get_career(self, name: str) -> Career:
        ...

    def get_career_requirements(self, name: str, country: str) -> List[CareerRequirement]:
        ...


# ---------- parsing ----------

def parse_catalog(country: str, subjects_json: Dict[str, Any], policy_json: Optional[Dict[str, Any]] = None) -> SubjectCatalog:
    subjects = [
        SubjectMapping(
            standard_name=s["standardName"],
            display_name=s.get("displayName", s["standardName"]),
            required=bool(s.get("required", False)),
        )
        for s in subjects_json.get("subjects", [])
    ]
    groups = []
    for g in subjects_json.get("eitherOrGroups", []):
        members = list(g["subjects"])
        if len(members) < 2:
            raise ValueError(f"Either/or group needs at least two subjects: {g!r}")
        groups.append(EitherOrGroup(
            subjects=members,
            description=g.get("description", ""),
            min_required=int(g.get("minRequired", 1)),
            max_allowed=int(g.get("maxAllowed", 1)),
        ))
    return SubjectCatalog(
        country=country.upper(),
        subjects=subjects,
        aliases=dict(subjects_json.get("subjectAliases", {})),
        either_or_groups=groups,
        mandatory_subjects=list(subjects_json.get("mandatorySubjects", [])),
        policy=dict(policy_json or {}),
    )


def _parse_sources(raw: Any) -> List[RequirementSource]:
    if not raw:
        return []
    # legacy records hold a single source object
    items = raw if isinstance(raw, list) else [raw]
    return [
        RequirementSource(
            institution=s.get("institution"),
            url=s.get("url"),
            aps=s.get("aps"),
            notes=s.get("notes"),
            verified_date=s.get("verifiedDate"),
        )
        for s in items
    ]


def parse_career(obj: Dict[str, Any]) -> Career:
    levels: Dict[str, List[QualificationLevel]] = {}
    for country, items in (obj.get("qualificationLevels") or {}).items():
        levels[country.upper()] = [
            QualificationLevel(
                level=q["level"],
                min_grades=dict(q.get("minGrades") or {}),
                aps=q.get("aps"),
                nqf_level=q.get("nqfLevel"),
                notes=q.get("notes"),
                pathway=q.get("pathway"),
                sources=_parse_sources(q.get("sources")),
            )
            for q in items
        ]
    return Career(
        name=obj["name"],
        min_grades=dict(obj.get("minGrades") or {}),
        category=obj.get("category"),
        country_baselines={k.upper(): dict(v) for k, v in (obj.get("countryBaselines") or {}).items()},
        qualification_levels=levels,
        verification_status=obj.get("verificationStatus"),
        last_verified=obj.get("lastVerified"),
    )


def requirements_for(career: Career, country: str) -> List[CareerRequirement]:
    """
    Tiers for a country, most demanding first.
    Priority: qualification levels > country baseline > default grades.
    """
    country = country.upper()
    tiers = [
        CareerRequirement(
            career=career.name,
            country=country,
            level=q.level,
            min_grades=dict(q.min_grades),
            aps=q.aps,
            nqf_level=q.nqf_level,
            sources=list(q.sources),
        )
        for q in career.qualification_levels.get(country, [])
        if q.min_grades
    ]
    if tiers:
        return tiers

    grades = dict(career.min_grades)
    grades.update(career.country_baselines.get(country, {}))
    return [CareerRequirement(career=career.name, country=country, level="Degree", min_grades=grades)]


# ---------- JSON files ----------

class JsonCatalogRepository:
    def __init__(self, data_root: str):
        self.data_root = data_root

    def _check_country(self, country: str) -> str:
        code = (country or "").strip().upper()
        if not code or not os.path.isdir(loaders.country_dir(self.data_root, code)):
            raise UnknownCountryError(country)
        return code

    def list_countries(self) -> List[Dict[str, Any]]:
        try:
            countries = loaders.load_countries(self.data_root)
        except (OSError, ValueError) as e:
            raise CatalogUnavailableError("countries", e) from e
        active = [c for c in countries if c.get("active") is True]
        return sorted(active, key=lambda c: c.get("name", ""))

    def get_subject_catalog(self, country: str) -> SubjectCatalog:
        code = self._check_country(country)
        try:
            subjects = loaders.load_subjects(self.data_root, code)
            policy = loaders.load_policy(self.data_root, code)
            catalog = parse_catalog(code, subjects, policy)
        except (OSError, ValueError, KeyError) as e:
            raise CatalogUnavailableError(f"subjects[{code}]", e) from e
        logger.debug("Loaded %d subjects for %s", len(catalog.subjects), code)
        return catalog

    def list_careers(self) -> List[Career]:
        try:
            return [parse_career(c) for c in loaders.load_careers(self.data_root)]
        except (OSError, ValueError, KeyError) as e:
            raise CatalogUnavailableError("careers", e) from e

    def get_career(self, name: str) -> Career:
        return _find_career(self.list_careers(), name)

    def get_career_requirements(self, name: str, country: str) -> List[CareerRequirement]:
        code = self._check_country(country)
        return requirements_for(self.get_career(name), code)


def _find_career(careers: List[Career], name: str) -> Career:
    for c in careers:
        if c.name == name:
            return c
    wanted = (name or "").strip().lower()
    for c in careers:
        if c.name.lower() == wanted:
            return c
    raise UnknownCareerError(name)


# ---------- cached ----------

class CachedCatalogRepository:
    """
    Wraps another repository with read-through caches: subject catalogs live
    for catalog_ttl seconds, the career list for career_ttl seconds.
    """

    def __init__(
        self,
        source: CatalogRepository,
        catalog_ttl: float,
        career_ttl: float,
        clock: Callable[[], float] = time.time,
        executor: Optional[Executor] = None,
    ):
        self.source = source
        self.catalogs = ReadThroughCache(source.get_subject_catalog, catalog_ttl, "subject-catalog", clock, executor)
        self.careers = ReadThroughCache(lambda _key: source.list_careers(), career_ttl, "careers", clock, executor)
        self.countries = ReadThroughCache(lambda _key: source.list_countries(), catalog_ttl, "countries", clock, executor)

    def list_countries(self) -> List[Dict[str, Any]]:
        return self.countries.get("all")

    def get_subject_catalog(self, country: str) -> SubjectCatalog:
        return self.catalogs.get((country or "").strip().upper())

    def list_careers(self) -> List[Career]:
        return self.careers.get("all")

    def get_career(self, name: str) -> Career:
        return _find_career(self.list_careers(), name)

    def get_career_requirements(self, name: str, country: str) -> List[CareerRequirement]:
        catalog = self.get_subject_catalog(country)
        return requirements_for(self.get_career(name), catalog.country)

    def clear(self) -> None:
        self.catalogs.clear()
        self.careers.clear()
        self.countries.clear()
