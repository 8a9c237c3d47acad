from careerpath.core.models import UserPreferences
from careerpath.core.rule_factory import RuleFactory
from careerpath.core.rules import EitherOrRule, Outcome, SubjectRequirementRule, classify


def test_classify_thresholds():
    assert classify(60, 60) is Outcome.MET
    assert classify(54, 60) is Outcome.CLOSE
    assert classify(53.9, 60) is Outcome.MISSING
    assert classify(150, 60) is Outcome.MET
    assert classify(-5, 60) is Outcome.MISSING


def test_subject_rule_skips_unattempted(za):
    rr = SubjectRequirementRule(za, "Physics", 60).evaluate({"Math": 70})
    assert rr.outcome is Outcome.SKIPPED
    assert not rr.scored
    assert rr.deficit == 0


def test_subject_rule_deficit(za):
    rr = SubjectRequirementRule(za, "Physics", 60).evaluate({"Physics": 52})
    assert rr.outcome is Outcome.MISSING
    assert rr.deficit == 8


def test_either_or_rule(za):
    rule = EitherOrRule(za, za.group_for("Math"), {"Math": 60, "MathLiteracy": 70, "Physics": 50})
    assert rule.label == "Math/MathLiteracy"
    assert rule.requirements == {"Math": 60, "MathLiteracy": 70}
    rr = rule.evaluate({"MathLiteracy": 66})
    assert rr.outcome is Outcome.CLOSE
    assert rr.deficit == 4


def test_factory_orders_groups_first(za):
    rules = RuleFactory(za).from_requirements({"Physics": 60, "English": 50, "Mathematics": 60})
    assert [r.label for r in rules] == ["Math/MathLiteracy", "English/EnglishFAL", "Physics"]


def test_factory_duplicate_spellings_keep_lower_bar(za):
    factory = RuleFactory(za)
    assert factory.normalize_requirements({"Math": 60, "Mathematics": 55}) == {"Math": 55}
    assert factory.normalize_requirements({"Physics": None, "Biology": 50}) == {"Biology": 50}


def test_factory_skips_compulsory_only_units_when_not_enforced(za):
    reqs = {"LifeOrientation": 50, "English": 50, "Physics": 60}
    relaxed = RuleFactory(za, UserPreferences(enforce_compulsory_subjects=False)).from_requirements(reqs)
    # EnglishFAL is optional, so the English group still counts
    assert [r.label for r in relaxed] == ["English/EnglishFAL", "Physics"]

    strict = RuleFactory(za, UserPreferences(enforce_compulsory_subjects=True)).from_requirements(reqs)
    assert [r.label for r in strict] == ["English/EnglishFAL", "LifeOrientation", "Physics"]
