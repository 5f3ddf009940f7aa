# efficience_root/visualization/__init__.py
#
# Visualization Package API
# This file initializes the visualization package and defines its public API,
# offering a clean interface for creating themed KPI charts.

"""
Initializes the visualization package, making key functions and classes
available at the top level for easier, cleaner imports in other modules.
"""

# --- Charting Functions ---
# Theme-aware Plotly charts carrying the trend, forecast and anomaly overlays.
from .plots import (
    create_empty_figure,
    plot_kpi_trend,
    plot_health_gauge,
    plot_practitioner_comparison,
    future_period_labels
)

# --- Theming ---
from .themes import efficience_theme_template, LEVEL_COLORS


__all__ = [
    # charts
    "create_empty_figure",
    "plot_kpi_trend",
    "plot_health_gauge",
    "plot_practitioner_comparison",
    "future_period_labels",

    # themes
    "efficience_theme_template",
    "LEVEL_COLORS",
]
