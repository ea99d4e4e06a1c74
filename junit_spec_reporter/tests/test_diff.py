from junit_spec_reporter.reporting.diff import generate_diff, show_diff, stringify
from junit_spec_reporter.reporting.models import ErrorDetail


def _err(**kwargs) -> ErrorDetail:
    return ErrorDetail(message="mismatch", kind="AssertionError", has_expected=True, **kwargs)


def test_show_diff_for_same_types():
    assert show_diff(_err(actual="a", expected="b"))
    assert show_diff(_err(actual=1, expected=2.5))
    assert show_diff(_err(actual={"a": 1}, expected={"a": 2}))


def test_show_diff_rejects_mismatched_types():
    assert not show_diff(_err(actual="1", expected=1))
    assert not show_diff(_err(actual=True, expected=1))


def test_show_diff_respects_opt_out_and_missing_expected():
    assert not show_diff(_err(actual="a", expected="b", show_diff=False))
    assert not show_diff(ErrorDetail(message="boom", actual="a"))
    assert not show_diff(None)


def test_generate_diff_marks_actual_and_expected_lines():
    diff = generate_diff("one\ntwo\nthree", "one\n2\nthree")
    assert "+ expected - actual" in diff
    assert "-two" in diff
    assert "+2" in diff
    assert "---" not in diff
    assert "+++" not in diff


def test_stringify_sorts_mapping_keys():
    assert stringify({"b": 1, "a": 2}).index('"a"') < stringify({"b": 1, "a": 2}).index('"b"')
    assert stringify("raw") == "raw"


def test_error_detail_from_dict_accepts_type_or_name():
    assert ErrorDetail.from_dict({"message": "m", "type": "TypeError"}).kind == "TypeError"
    assert ErrorDetail.from_dict({"message": "m", "name": "RangeError"}).kind == "RangeError"
    detail = ErrorDetail.from_dict({"message": "m", "actual": 1, "expected": None})
    assert detail.has_expected
    assert ErrorDetail.from_dict({"message": "m", "showDiff": False}).show_diff is False
