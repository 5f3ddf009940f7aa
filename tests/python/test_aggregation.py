import pandas as pd
import pytest

from analytics.switch import AISwitch
from analytics.aggregation import (
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
    compare_practitioners,
)
from data_processing.enrichment import build_monthly_kpis

ON = AISwitch(True)


def test_monthly_and_practitioner_totals(realisation):
    totals = monthly_totals(realisation, "montant_facture")
    assert list(totals.index) == ["202401", "202402"]
    assert totals.tolist() == [1500.0, 1700.0]

    per_practitioner = practitioner_totals(realisation, "montant_facture")
    assert per_practitioner.to_dict() == {"A": 2100.0, "B": 1100.0}
    assert practitioner_total(realisation, "B", "nb_patients") == 10.0
    assert practitioner_total(realisation, "Z", "nb_patients") == 0.0


def test_totals_on_missing_metric_or_empty_frame(realisation):
    assert monthly_totals(realisation, "montant_inconnu").empty
    assert monthly_totals(pd.DataFrame(), "montant_facture").empty


def test_monthly_totals_are_in_period_order():
    df = pd.DataFrame({"mois": ["202402", "202312", "202401"], "v": [3, 1, 2]})
    assert monthly_totals(df, "v").tolist() == [1.0, 2.0, 3.0]


def test_period_offsets_follow_calendar_months():
    assert period_offsets(["202311", "202312", "202401", "202404"]) == [0, 1, 2, 5]
    assert period_offsets([]) == []

    values, offsets = metric_series(pd.Series([5.0, 7.0], index=["202403", "202401"]))
    assert values == [7.0, 5.0]
    assert offsets == [0, 2]


@pytest.mark.parametrize("series,label,diff", [
    ([1500, 1700], "Hausse", 13.3),
    ([100, 103], "Stable", 3.0),
    ([100, 90], "Baisse", -10.0),
    ([0, 5], "Hausse", 0.0),
    ([0, 0], "Stable", 0.0),
])
def test_period_over_period_trend(series, label, diff):
    trend = period_over_period_trend(series)
    assert trend.label == label, f"{series} -> {trend}"
    assert trend.diff_pct == pytest.approx(diff)


def test_period_over_period_compares_only_last_two_periods():
    trend = period_over_period_trend([10, 1000, 1040])
    assert trend.label == "Stable"
    assert (trend.previous, trend.last) == (1000.0, 1040.0)


def test_period_over_period_threshold_is_a_parameter():
    assert period_over_period_trend([100, 108]).label == "Hausse"
    assert period_over_period_trend([100, 108], threshold_pct=10.0).label == "Stable"


def test_period_over_period_single_period():
    assert period_over_period_trend([42]) == PeriodTrend(last=42.0)
    assert period_over_period_trend(pd.Series(dtype=float)) == PeriodTrend()


def test_derived_ratios_guard_zero_denominators():
    assert encaissement_rate(900, 1000) == pytest.approx(90.0)
    assert encaissement_rate(5, 0) == 0.0
    assert absence_rate(10, 8) == pytest.approx(20.0)
    assert absence_rate(0, 0) == 0.0
    assert absence_rate(5, 8) == 0.0, "More patients than bookings is not a negative absence"
    assert acceptance_rate(3, 4) == pytest.approx(75.0)
    assert panier_moyen(1000, 10) == pytest.approx(100.0)
    assert panier_moyen(1000, 0) == 0.0


def test_health_inputs_from_kpis(realisation, rendez_vous, jours_ouverts):
    kpis = build_monthly_kpis(realisation, rendez_vous, jours_ouverts, praticien="A")
    inputs = health_inputs_from_kpis(kpis)

    assert inputs["taux_encaissement"] == pytest.approx(100.0)
    assert inputs["evolution_ca"] == pytest.approx(10.0)
    assert inputs["taux_absence"] == pytest.approx(20.0)
    assert inputs["production_horaire"] == pytest.approx(100.0)
    assert inputs["taux_nouveaux_patients"] == pytest.approx(25.0)

    assert set(health_inputs_from_kpis(kpis.iloc[0:0]).values()) == {0.0}


def test_admin_overview(realisation, rendez_vous):
    overview = admin_overview(realisation, rendez_vous)

    assert overview["periods"] == ["202401", "202402"]
    assert overview["trend_ca"].label == "Hausse"
    assert overview["trend_patients"].label == "Hausse"
    assert overview["total_absences"] == 6.0
    assert overview["total_presences"] == 34.0
    assert overview["taux_absence"] == pytest.approx(15.0)


def test_compare_practitioners(realisation, rendez_vous, jours_ouverts):
    table = compare_practitioners(realisation, rendez_vous, jours_ouverts, switch=ON).set_index("praticien")

    assert list(table.index) == ["A", "B"]
    a, b = table.loc["A"], table.loc["B"]

    assert a["absents"] == 6.0
    assert a["taux_absence"] == pytest.approx(15.0)
    assert a["tendance"] == "Hausse", "Absences went from 2 to 4"
    assert a["absence_trend"] == "upward"
    assert a["health_score"] == 63
    assert a["health_level"] == "moyen"

    assert b["total_rdv"] == 0.0
    assert b["taux_absence"] == 0.0
    assert b["taux_encaissement"] == pytest.approx(850 / 1100 * 100)
    assert b["absence_trend"] == "insufficient"
    assert b["health_score"] == 68


def test_compare_practitioners_with_models_disabled(realisation, rendez_vous):
    table = compare_practitioners(realisation, rendez_vous, switch=AISwitch(False))
    assert (table["health_score"] == 0).all()
    assert (table["absence_trend"] == "disabled").all()
    # Totals are plain aggregation and stay available.
    assert table["total_ca"].tolist() == [2100.0, 1100.0]
