# efficience_root/analytics/timeseries.py
#
# Time-series primitives: OLS linear regression, simple and double (Holt)
# exponential smoothing, trailing moving average and batch Z-score anomaly
# detection. Pure functions over short monthly series; results are plain
# frozen dataclasses so they can be compared and cached by callers.

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
from scipy import stats

try:
    from config.settings import settings
    from data_processing.helpers import safe_divide, round_half_up
    from .switch import AISwitch, resolve_switch
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in timeseries.py: A core dependency is missing. {e}", exc_info=True)
    raise

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegressionFit:
    slope: float = 0.0
    intercept: float = 0.0
    r2: float = 0.0


@dataclass(frozen=True)
class HoltState:
    level: float = 0.0
    trend: float = 0.0
    smoothed: Tuple[float, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AnomalyRecord:
    is_anomaly: bool = False
    z_score: float = 0.0
    direction: str = "normal"


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def finite_points(
    series: Sequence[float],
    x: Optional[Sequence[float]] = None
) -> Tuple[List[float], Optional[List[float]]]:
    """
    Drops NaN and infinite observations. When `x` matches the series length
    the same positions are dropped from it; otherwise `x` comes back as None.
    """
    y = np.asarray(series, dtype=float).reshape(-1)
    keep = np.isfinite(y)
    if x is None:
        return [float(v) for v in y[keep]], None
    if len(x) != y.size:
        logger.warning(f"Period offsets length {len(x)} does not match series length {y.size}; using the index.")
        return [float(v) for v in y[keep]], None
    xs = np.asarray(x, dtype=float).reshape(-1)
    keep &= np.isfinite(xs)
    return [float(v) for v in y[keep]], [float(v) for v in xs[keep]]


def linear_regression(
    series: Sequence[float],
    x: Optional[Sequence[float]] = None,
    switch: Optional[AISwitch] = None
) -> RegressionFit:
    """
    Fit y = intercept + slope * x by ordinary least squares (closed form).

    `x` defaults to the observation index 0..n-1. Pass true period offsets
    (see `analytics.aggregation.period_offsets`) so that missing months do not
    compress the time axis. Non-finite points are masked out of both axes.
    R^2 is 0 for a constant series.
    """
    if not resolve_switch(switch).enabled:
        return RegressionFit()

    y = np.asarray(series, dtype=float).reshape(-1)
    if x is None or len(x) != y.size:
        if x is not None:
            logger.warning(f"Regression offsets length {len(x)} does not match series length {y.size}; using the index.")
        xs = np.arange(y.size, dtype=float)
    else:
        xs = np.asarray(x, dtype=float).reshape(-1)

    m = np.isfinite(xs) & np.isfinite(y)
    xs, y = xs[m], y[m]
    n = y.size

    if n == 0:
        return RegressionFit()
    if n < 2:
        return RegressionFit(slope=0.0, intercept=float(y[0]), r2=0.0)

    sum_x = float(np.sum(xs))
    sum_y = float(np.sum(y))
    sum_xy = float(np.sum(xs * y))
    sum_x2 = float(np.sum(xs * xs))

    slope = safe_divide(n * sum_xy - sum_x * sum_y, n * sum_x2 - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n

    y_hat = slope * xs + intercept
    ss_res = float(np.sum((y - y_hat) ** 2))
    ss_tot = float(np.sum((y - sum_y / n) ** 2))
    r2 = 1.0 - ss_res / ss_tot if ss_tot > 0 else 0.0

    return RegressionFit(slope=slope, intercept=intercept, r2=_clamp(r2, 0.0, 1.0))


def predict_linear(fit: RegressionFit, x: float) -> float:
    """Evaluates a fitted regression line at position `x`."""
    return fit.slope * x + fit.intercept


def exponential_smoothing(
    series: Sequence[float],
    alpha: Optional[float] = None,
    switch: Optional[AISwitch] = None
) -> List[float]:
    """Single exponential smoothing; alpha is clamped into (0, 1]."""
    data = [float(v) for v in series]
    if not resolve_switch(switch).enabled:
        return data
    if not data:
        return []

    a = _clamp(settings.models.smoothing_alpha if alpha is None else alpha, 0.01, 1.0)
    smoothed = [data[0]]
    for value in data[1:]:
        smoothed.append(a * value + (1 - a) * smoothed[-1])
    return smoothed


def holt_smoothing(
    series: Sequence[float],
    alpha: Optional[float] = None,
    beta: Optional[float] = None,
    switch: Optional[AISwitch] = None
) -> HoltState:
    """
    Double exponential smoothing (Holt's linear trend method).

    Starts from level = x[0], trend = x[1] - x[0]. With a single point the
    state is flat at that value; with no points everything is zero.
    Non-finite observations are skipped.
    """
    if not resolve_switch(switch).enabled:
        return HoltState(smoothed=tuple(float(v) for v in series))
    data, _ = finite_points(series)
    if not data:
        return HoltState()
    if len(data) < 2:
        return HoltState(level=data[0], trend=0.0, smoothed=(data[0],))

    a = _clamp(settings.models.holt_alpha if alpha is None else alpha, 0.01, 1.0)
    b = _clamp(settings.models.holt_beta if beta is None else beta, 0.01, 1.0)

    level = data[0]
    trend = data[1] - data[0]
    smoothed = [level]
    for value in data[1:]:
        prev_level = level
        level = a * value + (1 - a) * (prev_level + trend)
        trend = b * (level - prev_level) + (1 - b) * trend
        smoothed.append(level)

    return HoltState(level=level, trend=trend, smoothed=tuple(smoothed))


def holt_forecast(state: HoltState, h: int) -> float:
    """Projects a Holt state `h` steps ahead."""
    return state.level + h * state.trend


def moving_average(
    series: Sequence[float],
    window: Optional[int] = None,
    switch: Optional[AISwitch] = None
) -> List[Optional[float]]:
    """
    Trailing simple moving average. The first `window - 1` entries are None.
    A series shorter than the window is returned unchanged.
    """
    data = [float(v) for v in series]
    if not resolve_switch(switch).enabled:
        return list(data)

    w = max(1, int(settings.models.moving_average_window if window is None else window))
    if len(data) < w:
        return list(data)

    result: List[Optional[float]] = [None] * (w - 1)
    for i in range(w - 1, len(data)):
        result.append(sum(data[i - w + 1:i + 1]) / w)
    return result


def detect_anomalies(
    series: Sequence[float],
    threshold: Optional[float] = None,
    switch: Optional[AISwitch] = None
) -> List[AnomalyRecord]:
    """
    Batch Z-score anomaly detection against the population mean and standard
    deviation of the whole series. A point is anomalous when |z| reaches the
    threshold. Fewer than three points, or a constant series, yield no anomalies.
    """
    data = np.asarray(series, dtype=float).reshape(-1)
    neutral = [AnomalyRecord() for _ in range(data.size)]
    if not resolve_switch(switch).enabled:
        return neutral
    if data.size < settings.models.anomaly_min_points:
        return neutral
    if not np.all(np.isfinite(data)) or float(np.std(data)) == 0.0:
        return neutral

    limit = settings.models.anomaly_threshold if threshold is None else threshold
    z_scores = stats.zscore(data, ddof=0)

    records = []
    for z in z_scores:
        z = float(z)
        if z >= limit:
            direction = "high"
        elif z <= -limit:
            direction = "low"
        else:
            direction = "normal"
        records.append(AnomalyRecord(is_anomaly=abs(z) >= limit, z_score=round_half_up(z, 2), direction=direction))
    return records
