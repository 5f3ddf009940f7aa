# efficience_root/visualization/themes.py
#
# Centralized Plotting Theme
# A single Plotly template shared by every Efficience chart so that trend,
# forecast and anomaly overlays look the same on all dashboards.

import plotly.graph_objects as go
import logging

# --- Core Application Imports ---
try:
    from config.settings import settings
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in themes.py: A core dependency is missing. {e}", exc_info=True)
    raise

efficience_theme_template = go.layout.Template(
    layout=go.Layout(
        # --- Fonts ---
        font=dict(
            family="sans-serif",
            size=12,
            color=settings.theme.text
        ),
        title=dict(
            font=dict(size=16, family="sans-serif"),
            x=0.02,
            xanchor='left'
        ),
        paper_bgcolor=settings.theme.secondary_background,
        plot_bgcolor=settings.theme.secondary_background,
        colorway=settings.theme.plotly_colorway,

        # --- Axes ---
        xaxis=dict(
            type='category',
            showgrid=False,
            showline=True,
            linecolor=settings.theme.text,
            zeroline=False,
            ticks='outside'
        ),
        yaxis=dict(
            showgrid=True,
            gridcolor='#EAEAEA',
            showline=False,
            zeroline=False,
            rangemode='tozero',
            separatethousands=True
        ),
        legend=dict(
            orientation='h',
            yanchor='bottom',
            y=1.02,
            xanchor='right',
            x=1,
            bgcolor=settings.theme.secondary_background
        ),
        margin=dict(l=60, r=30, t=70, b=50),
        hoverlabel=dict(
            bgcolor="#FFFFFF",
            font_size=12,
            font_family="sans-serif"
        ),
        hovermode='x unified',
        separators=', '
    )
)

# Colour per health level, reused by the gauge and by score badges.
LEVEL_COLORS = {
    "excellent": settings.theme.level_excellent,
    "bon": settings.theme.level_bon,
    "moyen": settings.theme.level_moyen,
    "critique": settings.theme.level_critique,
    "disabled": "#9CA3AF",
}

logging.getLogger(__name__).debug("Efficience Plotly theme template created successfully.")
