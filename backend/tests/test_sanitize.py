"""Tests for the document sanitizer."""
from lifedash.planning.sanitize import UNSET, is_absent, strip_absent


def _has_absent(value) -> bool:
    if isinstance(value, dict):
        return any(is_absent(v) or _has_absent(v) for v in value.values())
    if isinstance(value, list):
        return any(_has_absent(v) for v in value)
    return False


SAMPLES = [
    {},
    {"a": None},
    {"a": 1, "b": UNSET, "c": {"d": None, "e": [1, {"f": None, "g": "x"}]}},
    [{"a": None}, {"b": 2}],
    {"goals": [{"id": "g1", "tasks": [{"id": "t1", "completedAt": None, "done": False}]}]},
    "plain",
    42,
]


class TestStripAbsent:
    """Absent mapping values are dropped at every depth."""

    def test_drops_none_and_unset(self):
        assert strip_absent({"a": 1, "b": None, "c": UNSET}) == {"a": 1}

    def test_recurses_into_lists_and_mappings(self):
        value = {"c": {"d": None, "e": [1, {"f": None, "g": "x"}]}}
        assert strip_absent(value) == {"c": {"e": [1, {"g": "x"}]}}

    def test_keeps_falsy_values(self):
        value = {"a": 0, "b": "", "c": False, "d": [], "e": {}}
        assert strip_absent(value) == value

    def test_list_elements_are_kept(self):
        assert strip_absent([None, 1]) == [None, 1]

    def test_scalars_pass_through(self):
        assert strip_absent("x") == "x"
        assert strip_absent(3.5) == 3.5

    def test_input_is_not_modified(self):
        value = {"a": None, "b": {"c": None}}
        strip_absent(value)
        assert value == {"a": None, "b": {"c": None}}

    def test_no_absent_field_survives(self):
        for sample in SAMPLES:
            assert not _has_absent(strip_absent(sample))

    def test_idempotent(self):
        for sample in SAMPLES:
            once = strip_absent(sample)
            assert strip_absent(once) == once


def test_unset_is_a_falsy_singleton():
    assert not UNSET
    assert type(UNSET)() is UNSET
    assert repr(UNSET) == "UNSET"
