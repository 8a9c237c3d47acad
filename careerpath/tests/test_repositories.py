import json
import shutil

import pytest

from careerpath.core.errors import CatalogUnavailableError, UnknownCareerError, UnknownCountryError
from careerpath.core.repositories import JsonCatalogRepository, parse_career, requirements_for


def test_list_countries_only_active(repo):
    assert [c["code"] for c in repo.list_countries()] == ["ZA"]


def test_list_countries_sorted_by_name(tmp_path):
    countries = [
        {"code": "ZW", "name": "Zimbabwe", "active": True},
        {"code": "KE", "name": "Kenya", "active": True},
        {"code": "EG", "name": "Egypt", "active": False},
        {"code": "NG", "name": "Nigeria", "active": "yes"},
    ]
    (tmp_path / "countries.json").write_text(json.dumps(countries))
    names = [c["name"] for c in JsonCatalogRepository(str(tmp_path)).list_countries()]
    assert names == ["Kenya", "Zimbabwe"]


def test_subject_catalog(repo):
    catalog = repo.get_subject_catalog("za")
    assert catalog.country == "ZA"
    assert catalog.find("Math").display_name == "Mathematics"
    assert [g.label for g in catalog.either_or_groups] == ["Math/MathLiteracy", "English/EnglishFAL"]
    assert catalog.mandatory == ["Math", "English", "LifeOrientation"]
    assert catalog.policy["aps"]["countedSubjects"] == 6


def test_catalog_without_policy(repo):
    assert repo.get_subject_catalog("KE").policy == {}


def test_unknown_country(repo):
    with pytest.raises(UnknownCountryError):
        repo.get_subject_catalog("XX")
    with pytest.raises(UnknownCountryError):
        repo.get_subject_catalog("")


def test_malformed_catalog_is_unavailable(tmp_path):
    (tmp_path / "XX").mkdir()
    (tmp_path / "XX" / "subjects.json").write_text("{not json")
    with pytest.raises(CatalogUnavailableError):
        JsonCatalogRepository(str(tmp_path)).get_subject_catalog("XX")


def test_single_member_group_is_rejected(tmp_path):
    (tmp_path / "XX").mkdir()
    payload = {"subjects": [], "eitherOrGroups": [{"subjects": ["Math"]}]}
    (tmp_path / "XX" / "subjects.json").write_text(json.dumps(payload))
    with pytest.raises(CatalogUnavailableError):
        JsonCatalogRepository(str(tmp_path)).get_subject_catalog("XX")


def test_missing_careers_file(tmp_path, data_dir):
    shutil.copytree(f"{data_dir}/ZA", tmp_path / "ZA")
    repo = JsonCatalogRepository(str(tmp_path))
    assert repo.get_subject_catalog("ZA").country == "ZA"
    with pytest.raises(CatalogUnavailableError):
        repo.list_careers()


def test_get_career(repo):
    assert repo.get_career("Doctor").category == "Health"
    assert repo.get_career("software engineer").name == "Software Engineer"
    with pytest.raises(UnknownCareerError):
        repo.get_career("Astronaut")


def test_qualification_levels_take_priority(repo):
    tiers = repo.get_career_requirements("Doctor", "ZA")
    assert len(tiers) == 1
    degree = tiers[0]
    assert (degree.level, degree.aps, degree.nqf_level) == ("Degree", 42, 8)
    assert len(degree.sources) == 4


def test_empty_tiers_are_dropped(repo):
    tiers = repo.get_career_requirements("Software Engineer", "ZA")
    assert [t.level for t in tiers] == ["Degree", "Diploma"]
    assert [s.institution for s in tiers[1].sources] == ["Cape Peninsula University of Technology"]


def test_country_baseline_merges_over_defaults(repo):
    tiers = repo.get_career_requirements("Doctor", "KE")
    assert [t.level for t in tiers] == ["Degree"]
    assert tiers[0].min_grades == {
        "Math": 75,
        "Physics": 65,
        "Biology": 75,
        "English": 65,
        "Chemistry": 75,
    }
    assert repo.get_career_requirements("Engineer", "ZA")[0].min_grades["EGD"] == 60


def test_default_grades_when_nothing_country_specific(repo):
    tiers = repo.get_career_requirements("Lawyer", "ZW")
    assert tiers[0].min_grades == {"English": 65, "History": 60}
    assert tiers[0].sources == []


def test_parse_career_normalizes_country_codes():
    career = parse_career({
        "name": "Pharmacist",
        "minGrades": {"Chemistry": 60},
        "countryBaselines": {"za": {"Chemistry": 65}},
        "qualificationLevels": {
            "ke": [{"level": "Degree", "minGrades": {"Chemistry": 70}, "sources": {"institution": "University of Nairobi"}}],
        },
    })
    assert requirements_for(career, "za")[0].min_grades == {"Chemistry": 65}
    ke = requirements_for(career, "KE")[0]
    assert ke.min_grades == {"Chemistry": 70}
    assert ke.sources[0].institution == "University of Nairobi"
