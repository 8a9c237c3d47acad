import pytest

from careerpath.config import PROJECT_ROOT
from careerpath.core.engine import EligibilityEngine
from careerpath.core.normalization import SubjectResolver
from careerpath.core.repositories import JsonCatalogRepository

DATA_DIR = str(PROJECT_ROOT / "data")


@pytest.fixture
def repo():
    return JsonCatalogRepository(DATA_DIR)


@pytest.fixture
def engine(repo):
    return EligibilityEngine(repo)


@pytest.fixture
def za(repo):
    return SubjectResolver(repo.get_subject_catalog("ZA"))


@pytest.fixture
def data_dir():
    return DATA_DIR
