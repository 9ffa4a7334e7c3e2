"""Unit tests for condition handling and canonical serialization."""

import pytest
from unittest.mock import patch
from webapp.types.models import Condition
from webapp.utils.helpers import canonicalize_dict, is_blank, upsert_condition
from webapp.utils.objects import cached_property

NOW = "2024-05-01T12:00:00Z"
EARLIER = "2024-01-01T00:00:00Z"


def ready(status: str, message: str = "ready_replicas=1", ltt: str = None) -> Condition:
    return Condition(
        type="Ready",
        status=status,
        reason="PodsAvailable" if status == "True" else "Scaling",
        message=message,
        last_transition_time=ltt,
    )


@pytest.fixture(autouse=True)
def frozen_now():
    with patch("webapp.utils.helpers.now", return_value=NOW):
        yield


class TestUpsertCondition:
    def test_appends_new_type(self):
        other = Condition(
            type="Other", status="True", reason=None, message=None, last_transition_time=EARLIER
        )
        conds = upsert_condition([other], ready("True"))
        assert [c.type for c in conds] == ["Other", "Ready"]
        assert conds[1].last_transition_time == NOW

    def test_appends_to_empty(self):
        assert upsert_condition(None, ready("False")) == [ready("False", ltt=NOW)]

    def test_replaces_in_place(self):
        first = Condition(
            type="First", status="True", reason=None, message=None, last_transition_time=EARLIER
        )
        conds = upsert_condition([ready("False", ltt=EARLIER), first], ready("True"))
        assert [c.type for c in conds] == ["Ready", "First"]
        assert conds[0].status == "True"

    def test_unique_by_type(self):
        conds = [ready("True", ltt=EARLIER)]
        for _ in range(3):
            conds = upsert_condition(conds, ready("True"))
        assert len(conds) == 1

    def test_keeps_transition_time_when_status_holds(self):
        conds = upsert_condition(
            [ready("True", ltt=EARLIER)], ready("True", message="ready_replicas=2")
        )
        assert conds[0].last_transition_time == EARLIER
        assert conds[0].message == "ready_replicas=2"

    def test_moves_transition_time_when_status_flips(self):
        conds = upsert_condition([ready("True", ltt=EARLIER)], ready("False"))
        assert conds[0].last_transition_time == NOW

    def test_does_not_mutate_input(self):
        conds = [ready("True", ltt=EARLIER)]
        upsert_condition(conds, ready("False"))
        assert conds == [ready("True", ltt=EARLIER)]


class TestCanonicalizeDict:
    def test_insertion_order_does_not_matter(self):
        assert canonicalize_dict({"b": 1, "a": {"d": 2, "c": 3}}) == canonicalize_dict(
            {"a": {"c": 3, "d": 2}, "b": 1}
        )

    def test_compact(self):
        assert canonicalize_dict({"html": ""}) == '{"html":""}'

    def test_non_ascii_written_raw(self):
        assert canonicalize_dict({"html": "<p>café 日本</p>"}) == '{"html":"<p>café 日本</p>"}'


@pytest.mark.parametrize(
    "value, expected",
    [(None, True), ("", True), ("  \t\n", True), ("example.com", False), (" x ", False)],
)
def test_is_blank(value, expected):
    assert is_blank(value) is expected


class TestCachedProperty:
    def test_computed_once_and_resettable(self):
        class Holder:
            calls = 0

            @cached_property
            def value(self):
                Holder.calls += 1
                return Holder.calls

        holder = Holder()
        assert holder.value == 1
        assert holder.value == 1
        del holder.value
        assert holder.value == 2
        holder.value = 10
        assert holder.value == 10
