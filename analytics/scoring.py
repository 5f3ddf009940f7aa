# efficience_root/analytics/scoring.py
#
# Multi-KPI practice health score. Five business ratios are normalized to
# 0-100 independently and combined with fixed weights into one 0-100 score.

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

try:
    from config.settings import settings
    from data_processing.helpers import round_half_up
    from .switch import AISwitch, resolve_switch
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in scoring.py: A core dependency is missing. {e}", exc_info=True)
    raise

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HealthScore:
    global_score: int = 0
    scores: Dict[str, float] = field(default_factory=dict)
    weights: Dict[str, float] = field(default_factory=dict)
    level: str = "disabled"


@dataclass(frozen=True)
class HealthLabel:
    label: str
    emoji: str
    advice: str


def _bounded(value: float) -> float:
    return min(100.0, max(0.0, float(value)))


def health_level(score: float) -> str:
    cfg = settings.health
    if score >= cfg.excellent_min:
        return "excellent"
    if score >= cfg.bon_min:
        return "bon"
    if score >= cfg.moyen_min:
        return "moyen"
    return "critique"


def cabinet_health_score(
    taux_encaissement: float = 0.0,
    evolution_ca: float = 0.0,
    taux_absence: float = 0.0,
    production_horaire: float = 0.0,
    taux_nouveaux_patients: float = 0.0,
    switch: Optional[AISwitch] = None
) -> HealthScore:
    """
    Computes the weighted health score of a practice.

    Args:
        taux_encaissement: Collected / invoiced revenue, in percent.
        evolution_ca: Revenue growth, in percent. 0 % maps to 50 points.
        taux_absence: No-show rate, in percent. 20 % or more scores 0.
        production_horaire: Revenue per worked hour. 400/h scores 100.
        taux_nouveaux_patients: New patients share, in percent. 20 % scores 100.
    """
    if not resolve_switch(switch).enabled:
        return HealthScore()

    cfg = settings.health
    scores = {
        "encaissement": _bounded(taux_encaissement),
        "evolution": _bounded(cfg.evolution_center + evolution_ca * cfg.evolution_factor),
        "absence": _bounded(100 - taux_absence * cfg.absence_factor),
        "production": _bounded(production_horaire / cfg.production_benchmark * 100),
        "nouveaux": _bounded(taux_nouveaux_patients * cfg.nouveaux_factor),
    }
    weights = dict(cfg.weights)
    total = sum(scores[key] * weights[key] for key in scores)

    return HealthScore(
        global_score=int(round_half_up(total)),
        scores=scores,
        weights=weights,
        level=health_level(total),
    )


def simple_health_label(score: float) -> HealthLabel:
    """Plain-language badge for practitioners."""
    cfg = settings.health
    if score >= cfg.excellent_min:
        return HealthLabel("Excellent", "🟢", "Votre cabinet se porte très bien ! Maintenez cette dynamique.")
    if score >= cfg.bon_min:
        return HealthLabel("Bon", "🔵", "Le cabinet fonctionne bien. Quelques optimisations sont possibles.")
    if score >= cfg.moyen_min:
        return HealthLabel("Correct", "🟡", "Des améliorations sont possibles, notamment sur l'encaissement et le planning.")
    return HealthLabel("À améliorer", "🟠", "Plusieurs points méritent votre attention. Consultez les détails ci-dessous.")
