import pytest

from analytics import switch as switch_module
from analytics.switch import AISwitch, default_switch, is_ai_enabled, set_ai_enabled
from analytics.timeseries import (
    RegressionFit, linear_regression, holt_smoothing, moving_average, detect_anomalies, exponential_smoothing
)
from analytics.forecasting import forecast
from analytics.trend import analyze_trend
from analytics.scoring import cabinet_health_score
from analytics.insights import generate_ai_insight

REVENUE = [10000, 10500, 11000, 11600, 12300]


def _run_all(switch):
    return (
        linear_regression(REVENUE, switch=switch),
        exponential_smoothing(REVENUE, switch=switch),
        holt_smoothing(REVENUE, switch=switch),
        moving_average(REVENUE, switch=switch),
        detect_anomalies([10, 10, 10, 10, 100], switch=switch),
        forecast(REVENUE, 3, switch=switch),
        analyze_trend(REVENUE, switch=switch),
        cabinet_health_score(95, 10, 5, 300, 12, switch=switch),
        generate_ai_insight(REVENUE, "CA", switch=switch),
    )


@pytest.fixture
def restore_default_switch():
    previous = default_switch.enabled
    yield default_switch
    default_switch.set_enabled(previous)


def test_switch_object():
    flag = AISwitch()
    assert flag.enabled
    flag.set_enabled(False)
    assert not flag.enabled
    assert repr(flag) == "AISwitch(enabled=False)"


def test_disabled_results_are_identical_across_calls():
    off = AISwitch(False)
    assert _run_all(off) == _run_all(off)
    assert linear_regression(REVENUE, switch=off) == RegressionFit()
    assert forecast(REVENUE, 3, switch=off) == [0.0, 0.0, 0.0]
    assert not detect_anomalies([10, 10, 10, 10, 100], switch=off)[-1].is_anomaly


def test_re_enabling_leaves_no_residual_state():
    flag = AISwitch(False)
    _run_all(flag)
    flag.set_enabled(True)

    assert _run_all(flag) == _run_all(AISwitch(True)), "Re-enabled results must match a fresh switch"
    assert analyze_trend(REVENUE, switch=flag).trend == "upward"


def test_default_switch_toggle(restore_default_switch):
    set_ai_enabled(False)
    assert not is_ai_enabled()
    assert analyze_trend(REVENUE).trend == "disabled", "Calls without a switch read the default"
    # An explicit switch wins over the default.
    assert analyze_trend(REVENUE, switch=AISwitch(True)).trend == "upward"

    set_ai_enabled(True)
    assert is_ai_enabled()
    assert analyze_trend(REVENUE).trend == "upward"


def test_resolve_switch_prefers_explicit_instance():
    explicit = AISwitch(False)
    assert switch_module.resolve_switch(explicit) is explicit
    assert switch_module.resolve_switch(None) is default_switch
