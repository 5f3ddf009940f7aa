# efficience_root/analytics/trend.py
#
# Trend Classifier. Turns a regression slope into a qualitative trend using
# thresholds relative to the series mean, so a 200 €/month slope means
# something different on a 10 000 € series than on a 500 € one.

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

try:
    from config.settings import settings
    from data_processing.helpers import safe_divide, round_half_up
    from .switch import AISwitch, resolve_switch
    from .timeseries import finite_points, linear_regression, detect_anomalies
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in trend.py: A core dependency is missing. {e}", exc_info=True)
    raise

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrendDescriptor:
    trend: str = "insufficient"
    severity: str = "neutral"
    slope: float = 0.0
    r2: float = 0.0
    confidence: int = 0
    pct_change: float = 0.0
    nb_anomalies: int = 0
    mean: int = 0
    last_value: float = 0.0


def classify_slope(slope: float, mean: float) -> tuple:
    """Returns (trend, severity) for a slope relative to the magnitude of the series mean."""
    th = settings.thresholds
    directional = abs(mean) * th.directional_pct_of_mean
    strong = abs(mean) * th.strong_pct_of_mean

    if slope > directional:
        return "upward", ("strong" if slope > strong else "moderate")
    if slope < -directional:
        return "downward", ("strong" if slope < -strong else "moderate")
    return "stable", "neutral"


def analyze_trend(
    series: Sequence[float],
    x: Optional[Sequence[float]] = None,
    switch: Optional[AISwitch] = None
) -> TrendDescriptor:
    """
    Classifies a series as upward, downward or stable.

    `insufficient` is returned for fewer than two finite points, `disabled`
    when the AI switch is off. Non-finite observations are dropped first.
    `pct_change` compares the last value with the first and is 0 unless the
    first value is positive.
    """
    if not resolve_switch(switch).enabled:
        return TrendDescriptor(trend="disabled")

    values, x = finite_points(series, x)
    data = np.asarray(values, dtype=float)
    if data.size == 0:
        return TrendDescriptor()

    mean = float(np.mean(data))
    if data.size < 2:
        logger.debug("Trend analysis skipped: a single observation.")
        return TrendDescriptor(mean=int(round_half_up(mean)), last_value=float(data[-1]))

    fit = linear_regression(data, x=x, switch=switch)
    nb_anomalies = sum(1 for a in detect_anomalies(data, switch=switch) if a.is_anomaly)
    first, last = float(data[0]), float(data[-1])
    pct_change = round_half_up(safe_divide(last - first, first) * 100, 1) if first > 0 else 0.0

    trend, severity = classify_slope(fit.slope, mean)

    return TrendDescriptor(
        trend=trend,
        severity=severity,
        slope=fit.slope,
        r2=fit.r2,
        confidence=int(round_half_up(abs(fit.r2) * 100)),
        pct_change=pct_change,
        nb_anomalies=nb_anomalies,
        mean=int(round_half_up(mean)),
        last_value=last,
    )
