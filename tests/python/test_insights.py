from analytics.switch import AISwitch, AI_DISABLED_MSG
from analytics.insights import SIMPLE_DISABLED_MSG, generate_ai_insight, generate_simple_insight

ON = AISwitch(True)
REVENUE = [10000, 10500, 11000, 11600, 12300]


def test_revenue_insight_end_to_end():
    insight = generate_ai_insight(REVENUE, "chiffre d'affaires", switch=ON)

    assert insight.trend == "upward"
    assert insight.text == "\n".join(insight.parts)
    assert len(insight.parts) == 3, f"No anomaly sentence expected: {insight.parts}"
    assert "tendance haussière (forte)" in insight.parts[0]
    assert "+23.0%" in insight.parts[0]
    assert "chiffre d'affaires" in insight.parts[0]
    assert insight.parts[1].startswith("🎯 Fiabilité du modèle : 99%")
    assert "tendance à la hausse" in insight.parts[2], insight.parts[2]
    assert not any("anomalie" in part for part in insight.parts)
    assert insight.nb_anomalies == 0
    assert len(insight.forecast) == 3


def test_anomaly_sentence_lists_one_indexed_periods():
    insight = generate_ai_insight([10, 10, 10, 10, 100], "nombre de patients", switch=ON)

    assert insight.nb_anomalies == 1
    assert insight.parts[-1] == "⚠️ 1 anomalie(s) détectée(s) aux périodes : 5."


def test_stable_and_downward_templates():
    stable = generate_ai_insight([100, 100, 100, 100], "panier moyen", switch=ON)
    assert "globalement stable autour de 100" in stable.parts[0]

    falling = generate_ai_insight([100, 90, 80, 70], "CA", switch=ON)
    assert "en baisse significative (-30.0% sur la période)" in falling.parts[0]
    assert "tendance à la baisse" in falling.parts[2]


def test_insufficient_template():
    insight = generate_ai_insight([], "CA", switch=ON)
    assert insight.trend == "insufficient"
    assert "trop peu de données" in insight.parts[0]


def test_simple_insight_for_growing_revenue():
    simple = generate_simple_insight(REVENUE, "chiffre d'affaires", switch=ON)

    assert simple.parts[0].startswith("Excellente nouvelle !")
    assert (simple.trend_label, simple.trend_icon) == ("En hausse", "📈")
    assert any("analyse est fiable" in part for part in simple.parts)
    assert any(part.startswith("📈 Prévision : tendance à la hausse") for part in simple.parts)
    assert simple.nb_anomalies == 0


def test_simple_insight_with_a_single_month():
    simple = generate_simple_insight([5000], "CA", switch=ON)

    assert simple.parts == (
        "Pas encore assez de données pour analyser votre CA. Continuez à saisir vos données "
        "mensuelles pour obtenir des insights pertinents.",
    )
    assert simple.trend_label == "En attente"


def test_disabled_insights_are_fixed_messages():
    off = AISwitch(False)
    first = generate_ai_insight(REVENUE, "CA", switch=off)
    second = generate_ai_insight(REVENUE, "CA", switch=off)

    assert first == second
    assert first.text == AI_DISABLED_MSG
    assert first.trend == "disabled" and first.forecast == ()

    simple = generate_simple_insight(REVENUE, "CA", switch=off)
    assert simple.parts == (SIMPLE_DISABLED_MSG,)


def test_insight_on_series_with_a_missing_value():
    insight = generate_ai_insight([1.0, float("nan"), 3.0], "CA", switch=ON)

    assert insight.trend == "upward"
    assert "nan" not in insight.text.lower(), insight.text
    assert "tendance à la hausse" in insight.parts[2]
    assert insight.nb_anomalies == 0

    simple = generate_simple_insight([1.0, float("nan"), 3.0], "CA", switch=ON)
    assert simple.trend_label == "En hausse"
