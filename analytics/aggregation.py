# efficience_root/analytics/aggregation.py
#
# Aggregation Layer. Turns cleaned per-practitioner monthly records into the
# series and ratios consumed by the statistical core: monthly totals,
# per-practitioner totals, last-two-periods trends and derived rates.

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

try:
    from config.settings import settings
    from data_processing.helpers import safe_divide, round_half_up
    from data_processing.enrichment import build_monthly_kpis
    from .switch import AISwitch
    from .trend import analyze_trend
    from .scoring import cabinet_health_score
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in aggregation.py: A core dependency is missing. {e}", exc_info=True)
    raise

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeriodTrend:
    """Comparison of the last two periods (not a regression)."""
    label: str = "Stable"
    diff_pct: float = 0.0
    last: float = 0.0
    previous: float = 0.0


# --- Derived ratios (percent, zero denominators give 0) ---

def encaissement_rate(encaisse: float, facture: float) -> float:
    """Collected share of invoiced revenue, in percent."""
    return safe_divide(encaisse, facture) * 100

def absence_rate(nb_rdv: float, nb_patients: float) -> float:
    """Share of booked appointments with no patient seen, in percent."""
    return safe_divide(max(0.0, nb_rdv - nb_patients), nb_rdv) * 100

def acceptance_rate(nb_acceptes: float, nb_devis: float) -> float:
    """Share of quotes accepted, in percent."""
    return safe_divide(nb_acceptes, nb_devis) * 100

def panier_moyen(ca_facture: float, nb_patients: float) -> float:
    return safe_divide(ca_facture, nb_patients)


# --- Totals ---

def monthly_totals(df: pd.DataFrame, metric: str, period_col: str = "mois") -> pd.Series:
    """Sums a metric across all practitioners for each YYYYMM period, in period order."""
    if df.empty or metric not in df.columns:
        return pd.Series(dtype=float, name=metric)
    totals = df.groupby(period_col)[metric].sum().astype(float)
    return totals.sort_index().rename(metric)


def practitioner_totals(df: pd.DataFrame, metric: str, practitioner_col: str = "praticien") -> pd.Series:
    """Sums a metric across all months for each practitioner code."""
    if df.empty or metric not in df.columns:
        return pd.Series(dtype=float, name=metric)
    return df.groupby(practitioner_col)[metric].sum().astype(float).rename(metric)


def practitioner_total(df: pd.DataFrame, code: str, metric: str) -> float:
    totals = practitioner_totals(df, metric)
    return float(totals.get(code, 0.0))


def period_offsets(periods: Sequence[str]) -> List[int]:
    """
    Converts sorted YYYYMM keys into month offsets from the first period, so
    ['202401', '202402', '202405'] -> [0, 1, 4].
    """
    if len(periods) == 0:
        return []
    months = [int(str(p)[:4]) * 12 + int(str(p)[4:6]) - 1 for p in periods]
    return [m - months[0] for m in months]


def metric_series(totals: pd.Series) -> Tuple[List[float], List[int]]:
    """Splits a period-indexed total series into (values, month offsets)."""
    totals = totals.sort_index()
    return [float(v) for v in totals.values], period_offsets(list(totals.index))


# --- Period-over-period trend ---

def period_over_period_trend(
    totals: Union[pd.Series, Sequence[float]],
    threshold_pct: Optional[float] = None
) -> PeriodTrend:
    """
    Classifies the change between the last two periods as Hausse, Baisse or
    Stable. A zero previous period is Hausse when the last one is positive.
    """
    values = [float(v) for v in (totals.sort_index().values if isinstance(totals, pd.Series) else totals)]
    if len(values) < 2:
        return PeriodTrend(last=values[-1] if values else 0.0)

    threshold = settings.thresholds.period_change_pct if threshold_pct is None else threshold_pct
    last, previous = values[-1], values[-2]
    if previous == 0:
        return PeriodTrend(label="Hausse" if last > 0 else "Stable", diff_pct=0.0, last=last, previous=previous)

    diff = safe_divide(last - previous, previous) * 100
    if diff > threshold:
        label = "Hausse"
    elif diff < -threshold:
        label = "Baisse"
    else:
        label = "Stable"
    return PeriodTrend(label=label, diff_pct=round_half_up(diff, 1), last=last, previous=previous)


# --- Dashboard-level aggregates ---

def health_inputs_from_kpis(kpis: pd.DataFrame) -> Dict[str, float]:
    """
    Derives the five health-score inputs from one practitioner's monthly KPI
    table (see `build_monthly_kpis`). Rates use the latest month; revenue
    growth compares the last two months.
    """
    if kpis.empty:
        return {"taux_encaissement": 0.0, "evolution_ca": 0.0, "taux_absence": 0.0,
                "production_horaire": 0.0, "taux_nouveaux_patients": 0.0}

    kpis = kpis.sort_values("mois")
    last = kpis.iloc[-1]
    return {
        "taux_encaissement": encaissement_rate(last["ca_encaisse"], last["ca_facture"]),
        "evolution_ca": period_over_period_trend(list(kpis["ca_facture"])).diff_pct,
        "taux_absence": absence_rate(last["nb_rdv"], last["nb_patients_rdv"]),
        "production_horaire": float(last["rentabilite_horaire"]),
        "taux_nouveaux_patients": safe_divide(last["nb_nouveaux_patients"], last["nb_patients_rdv"]) * 100,
    }


def admin_overview(df_realisation: pd.DataFrame, df_rendez_vous: pd.DataFrame) -> Dict[str, Any]:
    """Cabinet-wide revenue/patient trends and real absences for the admin dashboard."""
    ca = monthly_totals(df_realisation, "montant_facture")
    patients = monthly_totals(df_realisation, "nb_patients")

    total_rdv = float(df_rendez_vous["nb_rdv"].sum()) if not df_rendez_vous.empty else 0.0
    total_seen = float(df_rendez_vous["nb_patients"].sum()) if not df_rendez_vous.empty else 0.0

    return {
        "periods": list(ca.index),
        "trend_ca": period_over_period_trend(ca),
        "trend_patients": period_over_period_trend(patients),
        "total_absences": max(0.0, total_rdv - total_seen),
        "total_presences": total_seen,
        "taux_absence": absence_rate(total_rdv, total_seen),
    }


def compare_practitioners(
    df_realisation: pd.DataFrame,
    df_rendez_vous: pd.DataFrame,
    df_jours_ouverts: Optional[pd.DataFrame] = None,
    switch: Optional[AISwitch] = None
) -> pd.DataFrame:
    """
    One comparison row per practitioner: totals, absences, rates, the
    last-two-months absence trend, the statistical absence trend over all
    months and the health score.
    """
    codes = sorted(set(df_realisation.get("praticien", pd.Series(dtype=str)))
                   | set(df_rendez_vous.get("praticien", pd.Series(dtype=str))))
    rows = []
    for code in codes:
        real_p = df_realisation[df_realisation["praticien"] == code] if not df_realisation.empty else df_realisation
        rdv_p = df_rendez_vous[df_rendez_vous["praticien"] == code] if not df_rendez_vous.empty else df_rendez_vous

        total_rdv = float(rdv_p["nb_rdv"].sum()) if not rdv_p.empty else 0.0
        presents = float(rdv_p["nb_patients"].sum()) if not rdv_p.empty else 0.0
        total_ca = float(real_p["montant_facture"].sum()) if not real_p.empty else 0.0
        total_encaisse = float(real_p["montant_encaisse"].sum()) if not real_p.empty else 0.0

        monthly_absences: List[float] = []
        if not rdv_p.empty:
            by_month = rdv_p.groupby("mois")[["nb_rdv", "nb_patients"]].sum().sort_index()
            monthly_absences = [float(v) for v in np.maximum(0, by_month["nb_rdv"] - by_month["nb_patients"])]

        kpis = build_monthly_kpis(real_p, rdv_p, df_jours_ouverts, praticien=code)
        health = cabinet_health_score(**health_inputs_from_kpis(kpis), switch=switch)

        rows.append({
            "praticien": code,
            "total_rdv": total_rdv,
            "presents": presents,
            "absents": max(0.0, total_rdv - presents),
            "taux_absence": absence_rate(total_rdv, presents),
            "total_ca": total_ca,
            "total_encaisse": total_encaisse,
            "taux_encaissement": encaissement_rate(total_encaisse, total_ca),
            "tendance": period_over_period_trend(monthly_absences).label,
            "absence_trend": analyze_trend(monthly_absences, switch=switch).trend,
            "health_score": health.global_score,
            "health_level": health.level,
        })

    logger.debug(f"Compared {len(rows)} practitioner(s).")
    return pd.DataFrame(rows)
