# efficience_root/analytics/insights.py
#
# Insight Text Generator. Assembles trend, forecast and anomaly results into
# deterministic French sentence fragments. Two registers are produced: an
# analyst version that names the statistics (R², anomalies by period) and a
# plain-language version for practitioners.

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

try:
    from config.settings import settings
    from data_processing.helpers import format_fr, round_half_up
    from .switch import AISwitch, AI_DISABLED_MSG, resolve_switch
    from .timeseries import detect_anomalies, finite_points
    from .forecasting import forecast
    from .trend import TrendDescriptor, analyze_trend
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in insights.py: A core dependency is missing. {e}", exc_info=True)
    raise

logger = logging.getLogger(__name__)

SIMPLE_DISABLED_MSG = "Les analyses sont actuellement désactivées."

_TREND_LABELS = {
    "upward": ("En hausse", "📈"),
    "downward": ("En baisse", "📉"),
    "stable": ("Stable", "➡️"),
}


@dataclass(frozen=True)
class Insight:
    text: str
    parts: Tuple[str, ...]
    trend: str
    confidence: int
    forecast: Tuple[float, ...] = field(default_factory=tuple)
    nb_anomalies: int = 0


@dataclass(frozen=True)
class SimpleInsight:
    parts: Tuple[str, ...]
    trend: str
    trend_label: str
    trend_icon: str
    confidence: int
    forecast: Tuple[float, ...] = field(default_factory=tuple)
    nb_anomalies: int = 0


def _signed(pct: float) -> str:
    return f"+{pct}" if pct > 0 else f"{pct}"


def _trend_sentence(trend: TrendDescriptor, metric_name: str) -> str:
    if trend.trend == "insufficient":
        return (f"📊 Le {metric_name} dispose de trop peu de données pour une analyse "
                f"approfondie (moyenne : {format_fr(trend.mean)}).")
    if trend.trend == "upward":
        strength = "forte" if trend.severity == "strong" else "modérée"
        return (f"📈 Le {metric_name} montre une tendance haussière ({strength}) avec une "
                f"variation de {_signed(trend.pct_change)}% sur la période.")
    if trend.trend == "downward":
        strength = "significative" if trend.severity == "strong" else "légère"
        return f"📉 Le {metric_name} est en baisse {strength} ({trend.pct_change}% sur la période)."
    return f"📊 Le {metric_name} est globalement stable autour de {format_fr(trend.mean)}."


def _average(values: Sequence[float]) -> int:
    return int(round_half_up(sum(values) / len(values)))


def generate_ai_insight(
    series: Sequence[float],
    metric_name: str = "indicateur",
    switch: Optional[AISwitch] = None
) -> Insight:
    """
    Builds the analyst insight for one metric.

    Fragments, in order: trend, model reliability, 3-period forecast
    direction, and the anomalous periods (1-indexed) when there are any.
    """
    if not resolve_switch(switch).enabled:
        return Insight(text=AI_DISABLED_MSG, parts=(AI_DISABLED_MSG,), trend="disabled", confidence=0)

    data = [float(v) for v in series]
    trend = analyze_trend(data, switch=switch)
    fc = forecast(data, settings.models.forecast_steps, switch=switch)
    anomalies = detect_anomalies(data, switch=switch)
    anomaly_periods = [i + 1 for i, a in enumerate(anomalies) if a.is_anomaly]
    finite, _ = finite_points(data)
    last_value = finite[-1] if finite else 0.0

    parts: List[str] = [
        _trend_sentence(trend, metric_name),
        f"🎯 Fiabilité du modèle : {trend.confidence}% (R² = {trend.r2:.2f}).",
    ]

    if fc:
        avg_forecast = _average(fc)
        if avg_forecast > last_value:
            direction = "hausse"
        elif avg_forecast < last_value:
            direction = "baisse"
        else:
            direction = "stabilisation"
        parts.append(f"🔮 Prévision IA ({len(fc)} prochaines périodes) : tendance à la {direction}, "
                     f"valeur estimée ~{format_fr(avg_forecast)}.")

    if anomaly_periods:
        parts.append(f"⚠️ {len(anomaly_periods)} anomalie(s) détectée(s) aux périodes : "
                     f"{', '.join(str(p) for p in anomaly_periods)}.")

    return Insight(
        text="\n".join(parts),
        parts=tuple(parts),
        trend=trend.trend,
        confidence=trend.confidence,
        forecast=tuple(fc),
        nb_anomalies=len(anomaly_periods),
    )


def generate_simple_insight(
    series: Sequence[float],
    metric_name: str = "indicateur",
    switch: Optional[AISwitch] = None
) -> SimpleInsight:
    """Practitioner-facing insight without statistical vocabulary."""
    if not resolve_switch(switch).enabled:
        return SimpleInsight(parts=(SIMPLE_DISABLED_MSG,), trend="disabled",
                             trend_label="Désactivé", trend_icon="⏸️", confidence=0)

    th = settings.thresholds
    data = [float(v) for v in series]
    trend = analyze_trend(data, switch=switch)
    fc = forecast(data, settings.models.forecast_steps, switch=switch)
    nb_anomalies = sum(1 for a in detect_anomalies(data, switch=switch) if a.is_anomaly)
    finite, _ = finite_points(data)
    last_value = finite[-1] if finite else 0.0
    pct = trend.pct_change

    parts: List[str] = []
    if trend.trend == "insufficient":
        parts.append(f"Pas encore assez de données pour analyser votre {metric_name}. Continuez à saisir "
                     f"vos données mensuelles pour obtenir des insights pertinents.")
    elif trend.trend == "upward" and trend.severity == "strong":
        parts.append(f"Excellente nouvelle ! Votre {metric_name} est en forte progression ({_signed(pct)}%). "
                     f"Continuez sur cette lancée.")
    elif trend.trend == "upward":
        parts.append(f"Bonne tendance : votre {metric_name} progresse légèrement ({_signed(pct)}%). "
                     f"Le cabinet est sur la bonne voie.")
    elif trend.trend == "downward" and trend.severity == "strong":
        parts.append(f"Attention : votre {metric_name} est en baisse importante ({pct}%). "
                     f"Il serait utile d'en identifier les causes.")
    elif trend.trend == "downward":
        parts.append(f"Votre {metric_name} montre un léger recul ({pct}%). Rien d'alarmant, mais à surveiller.")
    else:
        parts.append(f"Votre {metric_name} est stable autour de {format_fr(trend.mean)}. "
                     f"L'activité du cabinet est régulière.")

    if trend.confidence >= th.reliable_confidence:
        parts.append("✅ Cette analyse est fiable : les données sont suffisamment cohérentes.")
    elif trend.confidence >= th.moderate_confidence:
        parts.append("ℹ️ Analyse modérément fiable. Plus vous ajoutez de mois, plus les résultats seront précis.")
    elif len(finite) >= 2:
        parts.append("⚡ Analyse préliminaire. Les résultats gagneront en précision avec plus de données.")

    if fc and trend.trend != "insufficient":
        avg_forecast = _average(fc)
        if avg_forecast > last_value * (1 + th.simple_forecast_band):
            parts.append(f"📈 Prévision : tendance à la hausse pour les prochains mois "
                         f"(estimation ~{format_fr(avg_forecast)}).")
        elif avg_forecast < last_value * (1 - th.simple_forecast_band):
            parts.append(f"📉 Prévision : risque de baisse dans les prochains mois "
                         f"(estimation ~{format_fr(avg_forecast)}).")
        else:
            parts.append("➡️ Prévision : stabilité attendue pour les prochains mois.")

    if nb_anomalies > 0:
        parts.append(f"⚠️ {nb_anomalies} mois inhabituel(s) détecté(s) : des variations sortant de "
                     f"l'ordinaire ont été repérées.")

    trend_label, trend_icon = _TREND_LABELS.get(trend.trend, ("En attente", "⏳"))

    return SimpleInsight(
        parts=tuple(parts),
        trend=trend.trend,
        trend_label=trend_label,
        trend_icon=trend_icon,
        confidence=trend.confidence,
        forecast=tuple(fc),
        nb_anomalies=nb_anomalies,
    )
