"""Tests for the three-state date dimension reconciler."""

import math
from datetime import datetime

import pytest

from estatedesk.domains.agents import LAST_CONTACT, LAST_ENQUIRY, LAST_SEEN
from estatedesk.search.date_status import (
    EVER_FROM,
    DateLimits,
    Negative,
    Never,
    Positive,
    Unconstrained,
    reconcile,
    to_display,
)

MARCH_1 = math.floor(datetime(2024, 3, 1).timestamp())
MARCH_31_END = math.floor(datetime(2024, 3, 31, 23, 59, 59).timestamp())

ALL_INPUTS = [
    (None, {}),
    ("yes", {}),
    ("yes", {"start": "2024-03-01"}),
    ("yes", {"end": "2024-03-31"}),
    ("yes", {"start": "2024-03-01", "end": "2024-03-31"}),
    ("no", {}),
    ("no", {"start": "2024-03-01"}),
    ("no", {"end": "2024-03-31"}),
    ("no", {"start": "2024-03-01", "end": "2024-03-31"}),
]


def _populated_groups(criteria: dict, dim) -> int:
    positive = any(k in criteria for k in (dim.from_key, dim.to_key))
    negative = any(k in criteria for k in (dim.not_from_key, dim.not_to_key))
    never = criteria.get(dim.flag_key) is True
    return sum((positive, negative, never))


class TestReconcile:
    """reconcile(status, range) -> constraint."""

    def test_unset(self) -> None:
        assert reconcile(None, {"start": "2024-03-01"}) == Unconstrained()

    def test_yes_with_window(self) -> None:
        assert reconcile("yes", {"start": "2024-03-01", "end": "2024-03-31"}) == Positive(
            MARCH_1, MARCH_31_END
        )

    def test_yes_without_window_means_ever(self) -> None:
        assert reconcile("yes", {}) == Positive(EVER_FROM, None)

    def test_no_with_window(self) -> None:
        assert reconcile("no", {"end": "2024-03-31"}) == Negative(None, MARCH_31_END)

    def test_no_without_window_is_never(self) -> None:
        assert reconcile("no", {}) == Never()
        assert reconcile("no", None) == Never()

    def test_no_with_garbage_window_is_never(self) -> None:
        assert reconcile("no", {"start": "soon", "end": ""}) == Never()

    def test_unknown_status_is_unconstrained(self) -> None:
        assert reconcile("maybe", {"start": "2024-03-01"}) == Unconstrained()  # type: ignore[arg-type]

    def test_unknown_status_clears_dimension(self) -> None:
        criteria = LAST_SEEN.apply({}, "no", {})
        result = LAST_SEEN.apply(criteria, "maybe", {})  # type: ignore[arg-type]
        assert result == {"hasNeverBeenSeen": False}


class TestDimensionUpdates:
    """apply() writes exactly one group of keys."""

    def test_lastseen_positive_range(self) -> None:
        result = LAST_SEEN.apply({}, "yes", {"start": "2024-03-01", "end": "2024-03-31"})
        assert result["lastSeenFrom"] == str(MARCH_1)
        assert result["lastSeenTo"] == str(MARCH_31_END)
        assert result["hasNeverBeenSeen"] is False
        assert "lastSeenNotFrom" not in result
        assert "lastSeenNotTo" not in result

    def test_lastseen_no_without_bounds(self) -> None:
        stale = {
            "lastSeenFrom": "1",
            "lastSeenTo": "2",
            "lastSeenNotFrom": "3",
            "lastSeenNotTo": "4",
        }
        result = LAST_SEEN.apply(stale, "no", {})
        assert result["hasNeverBeenSeen"] is True
        for key in ("lastSeenFrom", "lastSeenTo", "lastSeenNotFrom", "lastSeenNotTo"):
            assert key not in result

    def test_unset_clears_everything(self) -> None:
        criteria = LAST_ENQUIRY.apply({}, "no", {})
        result = LAST_ENQUIRY.apply(criteria, None, {})
        assert result == {"hasNeverEnquired": False}

    def test_input_not_modified(self) -> None:
        original = {"lastSeenFrom": "100", "kam": ["Asha"]}
        LAST_SEEN.apply(original, "no", {})
        assert original == {"lastSeenFrom": "100", "kam": ["Asha"]}

    def test_other_dimensions_untouched(self) -> None:
        criteria = LAST_CONTACT.apply({}, "yes", {"start": "2024-03-01"})
        result = LAST_SEEN.apply(criteria, "no", {})
        assert result["lastContactFrom"] == str(MARCH_1)

    @pytest.mark.parametrize("start_status", [None, "yes", "no"])
    @pytest.mark.parametrize("status,rng", ALL_INPUTS)
    def test_mutual_exclusivity(self, start_status, status, rng) -> None:
        criteria = LAST_SEEN.apply({}, start_status, {"start": "2024-01-01"})
        result = LAST_SEEN.apply(criteria, status, rng)
        assert _populated_groups(result, LAST_SEEN) <= 1


class TestRoundTrip:
    """read() + to_display() invert apply()."""

    @pytest.mark.parametrize("status,rng", ALL_INPUTS)
    def test_display_reproduces_input(self, status, rng) -> None:
        criteria = LAST_ENQUIRY.apply({}, status, rng)
        assert LAST_ENQUIRY.display(criteria) == (status, rng)

    def test_read_prefers_never_over_stale_range(self) -> None:
        assert LAST_SEEN.read({"hasNeverBeenSeen": True, "lastSeenFrom": "5"}) == Never()

    def test_read_prefers_positive_over_negative(self) -> None:
        assert LAST_SEEN.read({"lastSeenFrom": "5", "lastSeenNotTo": "9"}) == Positive(5, None)

    def test_to_display_unconstrained(self) -> None:
        assert to_display(Unconstrained()) == (None, {})


class TestLimits:
    """Clamping to the index's observed range."""

    def test_clamps_both_bounds(self) -> None:
        limits = DateLimits(min=MARCH_1 + 3600, max=MARCH_31_END - 3600)
        result = LAST_SEEN.apply({}, "yes", {"start": "2024-03-01", "end": "2024-03-31"}, limits=limits)
        assert result["lastSeenFrom"] == str(MARCH_1 + 3600)
        assert result["lastSeenTo"] == str(MARCH_31_END - 3600)

    def test_unknown_limits_do_not_clamp(self) -> None:
        result = LAST_SEEN.apply({}, "no", {"start": "2024-03-01"}, limits=DateLimits(0, 0))
        assert result["lastSeenNotFrom"] == str(MARCH_1)

    def test_ever_marker_not_clamped(self) -> None:
        limits = DateLimits(min=MARCH_1, max=MARCH_31_END)
        assert limits.clamp(Positive(EVER_FROM, None)) == Positive(EVER_FROM, None)

    def test_negative_window_after_data_not_inverted(self) -> None:
        assert DateLimits(100, 200).clamp(Negative(500, 900)) == Negative(500, 900)

    def test_positive_window_before_data_not_inverted(self) -> None:
        assert DateLimits(1000, 2000).clamp(Positive(100, 500)) == Positive(100, 500)

    def test_partial_overlap_still_clamped(self) -> None:
        assert DateLimits(100, 200).clamp(Negative(150, 900)) == Negative(150, 200)

    def test_clamped_window_never_inverts_clause(self) -> None:
        limits = DateLimits(min=MARCH_1 - 10 * 86400, max=MARCH_1 - 86400)
        criteria = LAST_SEEN.apply({}, "no", {"start": "2024-03-01", "end": "2024-03-31"}, limits=limits)
        assert LAST_SEEN.clauses(criteria, datetime.now()) == [
            f"NOT lastSeen:{MARCH_1} TO {MARCH_31_END}"
        ]
        assert LAST_SEEN.display(criteria) == ("no", {"start": "2024-03-01", "end": "2024-03-31"})

    def test_never_not_clamped(self) -> None:
        assert DateLimits(5, 10).clamp(Never()) == Never()


class TestClauses:
    """Expression contribution per constraint."""

    def test_positive_ever(self) -> None:
        criteria = LAST_SEEN.apply({}, "yes", {})
        assert LAST_SEEN.clauses(criteria, datetime.now()) == ["lastSeen >= 1"]

    def test_negative_both_bounds(self) -> None:
        criteria = LAST_SEEN.apply({}, "no", {"start": "2024-03-01", "end": "2024-03-31"})
        assert LAST_SEEN.clauses(criteria, datetime.now()) == [
            f"NOT lastSeen:{MARCH_1} TO {MARCH_31_END}"
        ]

    def test_negative_open_start(self) -> None:
        criteria = LAST_SEEN.apply({}, "no", {"end": "2024-03-31"})
        assert LAST_SEEN.clauses(criteria, datetime.now()) == [f"NOT lastSeen:0 TO {MARCH_31_END}"]

    def test_unconstrained(self) -> None:
        assert LAST_SEEN.clauses({}, datetime.now()) == []
