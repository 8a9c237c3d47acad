"""
Qualification frameworks by country.

Each country labels its qualification tiers against its own framework
(NQF levels in South Africa, KCSE grades in Kenya, and so on). These maps
only drive how a tier is displayed.
"""
from typing import Dict, Optional, Union

FrameworkLevel = Union[str, int]

QUALIFICATION_FRAMEWORKS: Dict[str, Dict] = {
    "ZA": {
        "name": "NQF",
        "full_name": "National Qualifications Framework",
        "levels": {"Degree": 7, "BTech": 7, "Diploma": 6, "Certificate": 5},
    },
    "KE": {
        "name": "KCSE",
        "full_name": "Kenya Certificate of Secondary Education",
        "levels": {"Degree": "A", "BTech": "A-", "Diploma": "B+", "Certificate": "B"},
    },
    "NG": {
        "name": "WAEC",
        "full_name": "West African Examinations Council",
        "levels": {"Degree": "A1-A3", "BTech": "B2-B3", "Diploma": "C4-C6", "Certificate": "C7-D7"},
    },
    "ZW": {
        "name": "ZIMSEC",
        "full_name": "Zimbabwe School Examinations Council",
        "levels": {"Degree": "A", "BTech": "B", "Diploma": "C", "Certificate": "D"},
    },
    "ET": {
        "name": "General Education",
        "full_name": "Ethiopian General Education System",
        "levels": {"Degree": "Excellent", "BTech": "Very Good", "Diploma": "Good", "Certificate": "Satisfactory"},
    },
    "EG": {
        "name": "Thanaweya Amma",
        "full_name": "Egyptian General Secondary Education Certificate",
        "levels": {"Degree": "90-100%", "BTech": "80-89%", "Diploma": "70-79%", "Certificate": "60-69%"},
    },
}


def framework_level(country: str, level: str) -> Optional[FrameworkLevel]:
    framework = QUALIFICATION_FRAMEWORKS.get((country or "").upper())
    if not framework:
        return None
    return framework["levels"].get(level)


def format_qualification_level(level: str, country: str, nqf_level: Optional[int] = None) -> str:
    country = (country or "").upper()
    framework = QUALIFICATION_FRAMEWORKS.get(country)
    if country == "ZA":
        value = nqf_level or framework_level(country, level)
        return f"{level} (NQF {value})" if value else level
    if framework:
        value = framework["levels"].get(level)
        if value:
            return f"{level} ({framework['name']} {value})"
    return level
