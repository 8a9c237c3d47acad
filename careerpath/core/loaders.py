import json
import os
from typing import Any, Dict, List


def _read(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def country_dir(root: str, country: str) -> str:
    return os.path.join(root, country.upper())


def load_countries(root: str) -> List[Dict[str, Any]]:
    return _read(os.path.join(root, "countries.json"))


def load_subjects(root: str, country: str) -> Dict[str, Any]:
    return _read(os.path.join(country_dir(root, country), "subjects.json"))


def load_policy(root: str, country: str) -> Dict[str, Any]:
    path = os.path.join(country_dir(root, country), "policy.json")
    if not os.path.exists(path):
        return {}
    return _read(path)


def load_careers(root: str) -> List[Dict[str, Any]]:
    return _read(os.path.join(root, "careers.json"))
