from careerpath.core.either_or import partition, resolve_group


def _math_group(za):
    return za.group_for("Math")


def test_partition_splits_groups_from_standalone(za):
    groups, standalone = partition({"Physics": 60, "MathLiteracy": 50, "Math": 60}, za)
    assert [g.label for g in groups] == ["Math/MathLiteracy"]
    assert standalone == ["Physics"]


def test_partition_uses_catalog_order(za):
    groups, standalone = partition({"EnglishFAL": 50, "Math": 60}, za)
    assert [g.label for g in groups] == ["Math/MathLiteracy", "English/EnglishFAL"]
    assert standalone == []


def test_best_grade_and_least_demanding_requirement(za):
    res = resolve_group(_math_group(za), {"Math": 60, "MathLiteracy": 65},
                        {"Math": 55, "MathLiteracy": 72}, za)
    assert res.entered == ["Math", "MathLiteracy"]
    assert res.best_grade == 72
    assert res.min_required == 60


def test_requirement_taken_from_entered_members_only(za):
    res = resolve_group(_math_group(za), {"Math": 60, "MathLiteracy": 65}, {"MathLiteracy": 62}, za)
    assert res.entered == ["MathLiteracy"]
    assert res.min_required == 65


def test_entered_member_without_own_requirement(za):
    res = resolve_group(_math_group(za), {"Math": 60}, {"MathLiteracy": 58}, za)
    assert res.best_grade == 58
    assert res.min_required == 60


def test_unattempted_group(za):
    res = resolve_group(_math_group(za), {"Math": 60}, {"Physics": 70}, za)
    assert not res.attempted
    assert res.best_grade is None
    assert res.min_required is None
