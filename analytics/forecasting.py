# efficience_root/analytics/forecasting.py
#
# Short-horizon Forecast Engine (V2 - closed form)
# Blends an OLS projection with Holt's double exponential smoothing. The
# regression weight follows its R^2 but is kept inside [0.3, 0.7] so neither
# model is ever fully trusted. Forecasts are floored at zero: revenue and
# patient counts cannot be negative.

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

try:
    from config.settings import settings
    from data_processing.helpers import round_half_up
    from .switch import AISwitch, resolve_switch
    from .timeseries import (
        finite_points, linear_regression, predict_linear, holt_smoothing, holt_forecast
    )
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in forecasting.py: A core dependency is missing. {e}", exc_info=True)
    raise

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrendOverlay:
    """Chart-ready overlay: fitted trend line plus forecast points."""
    trend_line: Tuple[float, ...] = field(default_factory=tuple)
    forecast_line: Tuple[Optional[float], ...] = field(default_factory=tuple)
    forecast_values: Tuple[float, ...] = field(default_factory=tuple)
    r2: float = 0.0
    slope: float = 0.0


def forecast(
    series: Sequence[float],
    steps_ahead: Optional[int] = None,
    x: Optional[Sequence[float]] = None,
    switch: Optional[AISwitch] = None
) -> List[float]:
    """
    Forecasts the next `steps_ahead` periods of a series. Non-finite
    observations are dropped before fitting.

    Args:
        series: Observed values in chronological order.
        steps_ahead: Horizon; defaults to `settings.models.forecast_steps`.
        x: Optional period offsets of the observations. When given, the
           regression is projected from the last offset instead of the index.

    Returns:
        A list of non-negative forecasts rounded to 2 decimals.
    """
    steps = settings.models.forecast_steps if steps_ahead is None else max(0, int(steps_ahead))
    if not resolve_switch(switch).enabled:
        return [0.0] * steps

    data, x = finite_points(series, x)
    if len(data) < 2:
        logger.debug(f"Forecast on {len(data)} point(s): returning a flat projection.")
        return [data[0] if data else 0.0] * steps

    cfg = settings.models
    fit = linear_regression(data, x=x, switch=switch)
    holt = holt_smoothing(data, alpha=cfg.forecast_alpha, beta=cfg.forecast_beta, switch=switch)
    weight = max(cfg.forecast_weight_floor, min(cfg.forecast_weight_ceiling, fit.r2))

    last_x = float(x[-1]) if x is not None else float(len(data) - 1)

    predictions = []
    for h in range(1, steps + 1):
        combined = weight * predict_linear(fit, last_x + h) + (1 - weight) * holt_forecast(holt, h)
        predictions.append(max(0.0, round_half_up(combined, 2)))
    return predictions


def build_trend_overlay(
    series: Sequence[float],
    forecast_steps: Optional[int] = None,
    switch: Optional[AISwitch] = None
) -> TrendOverlay:
    """
    Produces the dataset overlays drawn on KPI charts: the regression line over
    the observed periods and the forecast, padded with None so it starts right
    after the last observation.
    """
    if not resolve_switch(switch).enabled:
        return TrendOverlay()

    data = [float(v) for v in series]
    fit = linear_regression(data, switch=switch)
    trend_line = tuple(max(0.0, round_half_up(predict_linear(fit, i), 2)) for i in range(len(data)))
    values = tuple(forecast(data, forecast_steps, switch=switch))

    return TrendOverlay(
        trend_line=trend_line,
        forecast_line=(None,) * len(data) + values,
        forecast_values=values,
        r2=fit.r2,
        slope=fit.slope,
    )
