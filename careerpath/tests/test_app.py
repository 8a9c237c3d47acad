import shutil

import pytest
from fastapi.testclient import TestClient

from careerpath.app import create_app
from careerpath.config import TestingConfig
from careerpath.core.repositories import JsonCatalogRepository

MIXED = {"Mathematics": 62, "English": 58, "Physical Sciences": 50, "Life Sciences": 64, "Life Orientation": 70}
STRONG = {
    "Math": 80,
    "Physics": 75,
    "Biology": 75,
    "English": 70,
    "Geography": 70,
    "History": 65,
    "LifeOrientation": 70,
}


@pytest.fixture
def client(repo):
    return TestClient(create_app(TestingConfig, repo))


def test_countries(client):
    res = client.get("/countries")
    assert res.status_code == 200
    assert [c["code"] for c in res.json()] == ["ZA"]
    assert res.headers["X-Request-ID"]


def test_subjects(client):
    body = client.get("/subjects", params={"country": "ZA"}).json()
    assert body["country"] == "ZA"
    assert body["either_or_groups"][0]["subjects"] == ["Math", "MathLiteracy"]
    assert "LifeOrientation" in body["mandatory_subjects"]


def test_unknown_country_is_404(client):
    res = client.get("/subjects", params={"country": "XX"})
    assert res.status_code == 404
    assert res.json()["error"] == "Unknown country"


def test_careers_with_level_labels(client):
    careers = {c["name"]: c for c in client.get("/careers", params={"country": "ZA"}).json()}
    labels = [lvl["label"] for lvl in careers["Software Engineer"]["levels"]]
    assert labels == ["Degree (NQF 7)", "Diploma (NQF 6)"]
    assert careers["Lawyer"]["category"] is None


def test_eligibility_for_one_career(client):
    res = client.post("/eligibility", json={"country": "ZA", "career": "Doctor", "grades": MIXED})
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "needs-improvement"
    assert body["missing_subjects"] == ["Math/MathLiteracy", "Physics"]
    assert body["missing_labels"] == ["Mathematics/Mathematical Literacy", "Physical Sciences"]
    assert body["close_labels"] == ["English (Home Language)/English (First Additional Language)", "Life Sciences"]
    assert body["warnings"] == []


def test_eligibility_ranking(client):
    body = client.post("/eligibility", json={"country": "ZA", "grades": MIXED}).json()
    names = [c["career"] for c in body["careers"]]
    assert names[:4] == ["Nurse", "IT Specialist", "Teacher", "Accountant"]
    assert body["careers"][3]["status"] == "close"


def test_eligibility_warns_about_compulsory_subjects(client):
    grades = {"Math": 70, "Physics": 70}
    body = client.post("/eligibility", json={"country": "ZA", "career": "Engineer", "grades": grades}).json()
    assert body["warnings"] == ["Compulsory subjects not entered: English (Home Language), Life Orientation"]

    relaxed = client.post("/eligibility", json={
        "country": "ZA", "career": "Engineer", "grades": grades, "enforce_compulsory_subjects": False,
    }).json()
    assert relaxed["warnings"] == []


def test_improvements(client):
    body = client.post("/improvements", json={"country": "ZA", "career": "Doctor", "grades": MIXED}).json()
    assert body["level"] == "Degree"
    assert body["improvements"] == {
        "Math/MathLiteracy": 8,
        "English/EnglishFAL": 2,
        "Physics": 15,
        "Biology": 6,
    }


def test_aps(client):
    grades = {
        "Mathematics": 80,
        "Physical Sciences": 75,
        "Life Sciences": 68,
        "English": 55,
        "Geography": 42,
        "History": 31,
        "Life Orientation": 65,
    }
    body = client.post("/aps", json={"country": "ZA", "grades": grades}).json()
    assert body["total"] == 32
    assert body["life_orientation"]["points"] == 5


def test_universities(client):
    body = client.post("/universities", json={"country": "ZA", "career": "Doctor", "grades": STRONG}).json()
    assert body["user_aps"] == 42
    rows = body["universities"]
    assert [u["institution"] for u in rows] == [
        "Stellenbosch University",
        "Witwatersrand University",
        "University of Cape Town",
    ]
    assert [u["status"] for u in rows] == ["qualified", "qualified", "close"]


def test_unknown_career_is_404(client):
    res = client.post("/improvements", json={"country": "ZA", "career": "Astronaut", "grades": MIXED})
    assert res.status_code == 404
    assert res.json()["error"] == "Unknown career"


def test_blank_country_is_400(client):
    res = client.post("/aps", json={"country": "  ", "grades": STRONG})
    assert res.status_code == 400


def test_missing_catalog_is_503(tmp_path, data_dir):
    shutil.copytree(f"{data_dir}/ZA", tmp_path / "ZA")
    client = TestClient(create_app(TestingConfig, JsonCatalogRepository(str(tmp_path))))
    res = client.post("/eligibility", json={"country": "ZA", "grades": STRONG})
    assert res.status_code == 503
    assert res.json()["error"] == "Catalog unavailable"
