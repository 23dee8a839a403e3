"""Tests for statusline_pro.services.cost_accumulator."""

import pytest

from statusline_pro.services.cost_accumulator import apply_cost
from statusline_pro.types import CostHistory, CostMetrics


def _observe(*reports: CostMetrics) -> CostHistory:
    history = CostHistory()
    for report in reports:
        history = apply_cost(history, report)
    return history


# ---------------------------------------------------------------------------
# 1. Monotonic growth never folds
# ---------------------------------------------------------------------------

def test_growth_keeps_accumulated_at_zero():
    history = _observe(CostMetrics(total_cost_usd=1.0), CostMetrics(total_cost_usd=2.0))
    assert history.current.total_cost_usd == 2.0
    assert history.accumulated.total_cost_usd == 0.0
    assert history.total.total_cost_usd == 2.0


# ---------------------------------------------------------------------------
# 2. A drop folds the previous value into accumulated
# ---------------------------------------------------------------------------

def test_reset_folds_previous_cycle():
    history = _observe(
        CostMetrics(total_cost_usd=1.0),
        CostMetrics(total_cost_usd=2.0),
        CostMetrics(total_cost_usd=0.5),
    )
    assert history.current.total_cost_usd == 0.5
    assert history.accumulated.total_cost_usd == 2.0
    assert history.total.total_cost_usd == 2.5


def test_multiple_resets_accumulate():
    history = _observe(
        CostMetrics(total_cost_usd=3.0),
        CostMetrics(total_cost_usd=1.0),
        CostMetrics(total_cost_usd=0.25),
    )
    assert history.accumulated.total_cost_usd == pytest.approx(4.0)
    assert history.total.total_cost_usd == pytest.approx(4.25)


def test_equal_value_is_not_a_reset():
    history = _observe(CostMetrics(total_cost_usd=1.5), CostMetrics(total_cost_usd=1.5))
    assert history.accumulated.total_cost_usd == 0.0
    assert history.total.total_cost_usd == 1.5


# ---------------------------------------------------------------------------
# 3. Fields are independent
# ---------------------------------------------------------------------------

def test_fields_fold_independently():
    history = _observe(
        CostMetrics(total_cost_usd=1.0, total_lines_added=10, total_duration_ms=5000),
        CostMetrics(total_cost_usd=1.2, total_lines_added=0, total_duration_ms=6000),
    )
    assert history.accumulated.total_cost_usd == 0.0
    assert history.accumulated.total_lines_added == 10
    assert history.accumulated.total_duration_ms == 0
    assert history.total.total_lines_added == 10
    assert history.total.total_duration_ms == 6000


def test_zero_previous_value_never_folds():
    history = _observe(CostMetrics(total_lines_removed=0), CostMetrics(total_lines_removed=0))
    assert history.accumulated.total_lines_removed == 0


# ---------------------------------------------------------------------------
# 4. total == current + accumulated for every field
# ---------------------------------------------------------------------------

def test_total_is_current_plus_accumulated():
    history = _observe(
        CostMetrics(1.0, 1000, 800, 20, 5),
        CostMetrics(0.2, 100, 50, 1, 0),
        CostMetrics(0.4, 300, 90, 4, 2),
    )
    assert history.total == history.current.plus(history.accumulated)
    assert history.accumulated == CostMetrics(1.0, 1000, 800, 20, 5)


# ---------------------------------------------------------------------------
# 5. Payload parsing
# ---------------------------------------------------------------------------

def test_from_payload_defaults_missing_fields():
    metrics = CostMetrics.from_payload({"total_cost_usd": 0.75})
    assert metrics == CostMetrics(total_cost_usd=0.75)


def test_from_payload_ignores_invalid_values():
    metrics = CostMetrics.from_payload({
        "total_cost_usd": "lots",
        "total_duration_ms": -5,
        "total_lines_added": True,
    })
    assert metrics == CostMetrics()
