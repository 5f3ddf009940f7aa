import pytest

from analytics.switch import AISwitch
from analytics.scoring import HealthScore, cabinet_health_score, health_level, simple_health_label

ON = AISwitch(True)


def test_weights_sum_to_one():
    health = cabinet_health_score(switch=ON)
    assert sum(health.weights.values()) == pytest.approx(1.0, abs=1e-12)
    assert set(health.weights) == {"encaissement", "evolution", "absence", "production", "nouveaux"}


def test_perfect_encaissement_alone():
    health = cabinet_health_score(100, 0, 0, 0, 0, switch=ON)

    # Encaissement contributes its full weight (0.30 x 100) ...
    assert health.scores["encaissement"] == 100.0
    assert health.scores["encaissement"] * health.weights["encaissement"] == pytest.approx(30.0)
    # ... and 0 % growth and 0 % absence are not zero scores.
    assert health.scores["evolution"] == 50.0
    assert health.scores["absence"] == 100.0
    assert health.global_score == 58, f"30 + 12.5 + 15 rounds to 58, got {health.global_score}"
    assert health.level == "moyen"


def test_all_criteria_saturated():
    health = cabinet_health_score(100, 25, 0, 400, 20, switch=ON)
    assert all(score == 100.0 for score in health.scores.values()), health.scores
    assert health.global_score == 100
    assert health.level == "excellent"


def test_all_criteria_at_floor():
    health = cabinet_health_score(0, -25, 20, 0, 0, switch=ON)
    assert health.global_score == 0
    assert health.level == "critique"


def test_inputs_are_clamped():
    health = cabinet_health_score(150, -40, 30, 1200, 50, switch=ON)
    assert health.scores == {
        "encaissement": 100.0,
        "evolution": 0.0,
        "absence": 0.0,
        "production": 100.0,
        "nouveaux": 100.0,
    }
    assert 0 <= health.global_score <= 100


@pytest.mark.parametrize("score,level", [
    (80, "excellent"), (79.9, "bon"), (65, "bon"), (64.9, "moyen"), (50, "moyen"), (49.9, "critique"),
])
def test_level_bands(score, level):
    assert health_level(score) == level


def test_simple_labels():
    assert simple_health_label(85).label == "Excellent"
    assert simple_health_label(70).label == "Bon"
    assert simple_health_label(55).label == "Correct"
    low = simple_health_label(10)
    assert low.label == "À améliorer" and low.emoji == "🟠"


def test_disabled_health_score():
    health = cabinet_health_score(100, 25, 0, 400, 20, switch=AISwitch(False))
    assert health == HealthScore()
    assert health.global_score == 0 and health.level == "disabled"
