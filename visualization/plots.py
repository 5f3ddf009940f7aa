# efficience_root/visualization/plots.py
#
# KPI Chart Factory
# Builds the themed Plotly figures shown on the dashboards from the plain
# result objects of the analytics core: observed series with trend line,
# forecast points and anomaly markers, the health score gauge and the
# practitioner comparison bars.

import html
import logging
from typing import List, Optional, Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

# --- Core Application & Visualization Imports ---
try:
    from config.settings import settings
    from analytics.switch import AISwitch, resolve_switch
    from analytics.forecasting import build_trend_overlay
    from analytics.timeseries import detect_anomalies
    from analytics.scoring import HealthScore
    from .themes import efficience_theme_template, LEVEL_COLORS
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in plots.py: A core dependency is missing. {e}", exc_info=True)
    raise

logger = logging.getLogger(__name__)


def future_period_labels(periods: Sequence[str], steps: int) -> List[str]:
    """
    Labels for the forecast points. YYYYMM keys are continued month by month;
    any other label falls back to '+1', '+2', ...
    """
    last = str(periods[-1]) if len(periods) else ""
    if len(last) == 6 and last.isdigit() and 1 <= int(last[4:]) <= 12:
        year, month = int(last[:4]), int(last[4:])
        labels = []
        for _ in range(steps):
            month += 1
            if month > 12:
                year, month = year + 1, 1
            labels.append(f"{year}{month:02d}")
        return labels
    return [f"+{h}" for h in range(1, steps + 1)]


class KpiChartFactory:
    """A factory class for creating standardized, Efficience-specific Plotly charts."""

    def __init__(self, theme_template: go.layout.Template):
        self.theme = theme_template
        px.defaults.template = self.theme

    def create_empty_figure(self, title: str, message: str = "Aucune donnée disponible pour cette période.") -> go.Figure:
        """Creates a themed, blank figure with a user-friendly message."""
        fig = go.Figure()
        fig.update_layout(template=self.theme, title_text=f'<b>{html.escape(title)}</b>',
                          xaxis={'visible': False}, yaxis={'visible': False})
        fig.add_annotation(text=message, xref="paper", yref="paper", x=0.5, y=0.5, showarrow=False, font_size=14)
        return fig

    def plot_kpi_trend(
        self,
        values: Sequence[float],
        periods: Sequence[str],
        title: str,
        y_axis_title: str,
        show_overlays: bool = True,
        switch: Optional[AISwitch] = None
    ) -> go.Figure:
        """
        Line chart of a monthly KPI. When the models are enabled the trend
        line, the forecast points and the anomaly markers are drawn on top.
        """
        if len(values) == 0 or len(values) != len(periods):
            if len(values) != len(periods):
                logger.warning(f"Cannot plot '{title}': {len(values)} values for {len(periods)} periods.")
            return self.create_empty_figure(title)

        x = [str(p) for p in periods]
        y = [float(v) for v in values]
        hovertemplate = f"{html.escape(y_axis_title)}: %{{y:,.2f}}<extra></extra>"

        fig = go.Figure()
        fig.add_trace(go.Scatter(x=x, y=y, mode='lines+markers', name=y_axis_title,
                                 line=dict(color=settings.theme.primary, width=3),
                                 hovertemplate=hovertemplate))

        if show_overlays and resolve_switch(switch).enabled:
            overlay = build_trend_overlay(y, switch=switch)
            fig.add_trace(go.Scatter(x=x, y=list(overlay.trend_line), mode='lines', name='Tendance',
                                     line=dict(color=settings.theme.trend_line, width=2, dash='dash'),
                                     hovertemplate=hovertemplate))
            if overlay.forecast_values:
                future = future_period_labels(x, len(overlay.forecast_values))
                # Start the forecast from the last observation so the line is continuous.
                fig.add_trace(go.Scatter(x=[x[-1]] + future, y=[y[-1]] + list(overlay.forecast_values),
                                         mode='lines+markers', name='Prévision',
                                         line=dict(color=settings.theme.forecast, width=2, dash='dot'),
                                         hovertemplate=hovertemplate))

            flagged = [(x[i], y[i]) for i, a in enumerate(detect_anomalies(y, switch=switch)) if a.is_anomaly]
            if flagged:
                fig.add_trace(go.Scatter(x=[p for p, _ in flagged], y=[v for _, v in flagged], mode='markers',
                                         name='Anomalie',
                                         marker=dict(color=settings.theme.anomaly, size=12, symbol='x'),
                                         hovertemplate=hovertemplate))

        fig.update_layout(template=self.theme, title_text=f"<b>{html.escape(title)}</b>",
                          yaxis_title=y_axis_title, xaxis_title=None)
        return fig

    def plot_health_gauge(self, health: HealthScore, title: str = "Score de santé du cabinet") -> go.Figure:
        """Gauge of the 0-100 health score, banded by level."""
        if health.level == "disabled":
            return self.create_empty_figure(title, message="Analyses désactivées.")
        cfg = settings.health
        fig = go.Figure(go.Indicator(
            mode="gauge+number", value=health.global_score, title={'text': f"<b>{html.escape(title)}</b>"},
            gauge={'axis': {'range': [0, 100]},
                   'steps': [{'range': [0, cfg.moyen_min], 'color': LEVEL_COLORS["critique"]},
                             {'range': [cfg.moyen_min, cfg.bon_min], 'color': LEVEL_COLORS["moyen"]},
                             {'range': [cfg.bon_min, cfg.excellent_min], 'color': LEVEL_COLORS["bon"]},
                             {'range': [cfg.excellent_min, 100], 'color': LEVEL_COLORS["excellent"]}],
                   'bar': {'color': settings.theme.text, 'thickness': 0.3}}))
        fig.update_layout(template=self.theme, height=300, margin=dict(l=30, r=30, t=50, b=30))
        return fig

    def plot_practitioner_comparison(self, df: pd.DataFrame, metric: str, title: str) -> go.Figure:
        """Bar chart of one comparison column per practitioner."""
        if df.empty or not all(col in df.columns for col in ["praticien", metric]):
            return self.create_empty_figure(title)
        fig = px.bar(df.sort_values(metric, ascending=False), x="praticien", y=metric,
                     title=f'<b>{html.escape(title)}</b>', text_auto=True)
        fig.update_layout(yaxis_title=None, xaxis_title="Praticien", uniformtext_minsize=8, uniformtext_mode='hide')
        fig.update_traces(textangle=0, textposition="outside", cliponaxis=False,
                          marker_color=settings.theme.primary)
        return fig


# --- Singleton Instance and Public API ---
_chart_factory = KpiChartFactory(efficience_theme_template)

create_empty_figure = _chart_factory.create_empty_figure
plot_kpi_trend = _chart_factory.plot_kpi_trend
plot_health_gauge = _chart_factory.plot_health_gauge
plot_practitioner_comparison = _chart_factory.plot_practitioner_comparison
