# efficience_root/analytics/__init__.py
#
# Analytics Package API
# This file initializes the analytics package and defines its public API:
# the closed-form time-series primitives, the blended forecast, the trend
# classifier, the health score, the insight generator and the aggregation
# helpers that feed them.

"""
Initializes the analytics package, making key functions and classes
available at the top level for easier, cleaner imports in other modules.
"""

# --- Kill Switch ---
from .switch import (
    AISwitch,
    AI_DISABLED_MSG,
    default_switch,
    set_ai_enabled,
    is_ai_enabled
)

# --- Time-Series Primitives ---
# OLS regression, exponential/Holt smoothing, moving average and Z-score
# anomaly detection over plain sequences of numbers.
from .timeseries import (
    RegressionFit,
    HoltState,
    AnomalyRecord,
    linear_regression,
    predict_linear,
    exponential_smoothing,
    holt_smoothing,
    holt_forecast,
    moving_average,
    detect_anomalies
)

# --- Forecasting & Trend ---
from .forecasting import TrendOverlay, forecast, build_trend_overlay
from .trend import TrendDescriptor, analyze_trend

# --- Scoring & Insights ---
from .scoring import HealthScore, HealthLabel, cabinet_health_score, health_level, simple_health_label
from .insights import Insight, SimpleInsight, generate_ai_insight, generate_simple_insight

# --- Aggregation & KPIs ---
# Monthly and per-practitioner totals, last-two-periods trends and the
# derived ratios computed from cleaned monthly records.
from .aggregation import (
    PeriodTrend,
    monthly_totals,
    practitioner_totals,
    practitioner_total,
    period_offsets,
    metric_series,
    period_over_period_trend,
    encaissement_rate,
    absence_rate,
    acceptance_rate,
    panier_moyen,
    health_inputs_from_kpis,
    admin_overview,
    compare_practitioners
)


# --- Define the public API for the analytics package ---
__all__ = [
    # Switch
    "AISwitch",
    "AI_DISABLED_MSG",
    "default_switch",
    "set_ai_enabled",
    "is_ai_enabled",

    # Primitives
    "RegressionFit",
    "HoltState",
    "AnomalyRecord",
    "linear_regression",
    "predict_linear",
    "exponential_smoothing",
    "holt_smoothing",
    "holt_forecast",
    "moving_average",
    "detect_anomalies",

    # Forecasting & Trend
    "TrendOverlay",
    "forecast",
    "build_trend_overlay",
    "TrendDescriptor",
    "analyze_trend",

    # Scoring & Insights
    "HealthScore",
    "HealthLabel",
    "cabinet_health_score",
    "health_level",
    "simple_health_label",
    "Insight",
    "SimpleInsight",
    "generate_ai_insight",
    "generate_simple_insight",

    # Aggregation & KPIs
    "PeriodTrend",
    "monthly_totals",
    "practitioner_totals",
    "practitioner_total",
    "period_offsets",
    "metric_series",
    "period_over_period_trend",
    "encaissement_rate",
    "absence_rate",
    "acceptance_rate",
    "panier_moyen",
    "health_inputs_from_kpis",
    "admin_overview",
    "compare_practitioners",
]
