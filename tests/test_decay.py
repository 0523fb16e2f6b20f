"""Tests for the sticky-signal decay function."""

from __future__ import annotations

from datetime import timedelta

import pytest

from narrative.signals.decay import EXPIRY_DAYS, days_between, decay, decayed_impact
from tests.conftest import NOW


@pytest.mark.parametrize(
    "days_ago, expected",
    [
        (0, 1.0),
        (1, 0.85),
        (2, 0.60),
        (3, 0.60),
        (4, 0.30),
        (7, 0.30),
        (8, 0.10),
        (14, 0.10),
        (15, 0.05),
        (30, 0.05),
        (31, 0.0),
        (365, 0.0),
    ],
)
def test_decay_buckets(days_ago, expected):
    """Test each step of the decay table, including both bucket edges."""
    assert decay(days_ago) == pytest.approx(expected)


def test_decay_future_events_full_weight():
    """Test that events dated in the future are treated as today."""
    assert decay(-2) == 1.0


def test_decay_is_non_increasing():
    """Test that decay never increases with age."""
    values = [decay(d) for d in range(0, 40)]
    assert values == sorted(values, reverse=True)


def test_decayed_impact():
    """Test base impact times decay multiplier."""
    assert decayed_impact(5, 2) == pytest.approx(3.0)
    assert decayed_impact(5, EXPIRY_DAYS + 1) == 0


def test_days_between_floors_partial_days():
    """Test that partial days are floored."""
    assert days_between(NOW - timedelta(hours=23), NOW) == 0
    assert days_between(NOW - timedelta(days=1, hours=23), NOW) == 1
    assert days_between(NOW - timedelta(days=31), NOW) == 31
