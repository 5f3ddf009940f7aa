# efficience_root/data_processing/__init__.py
#
# Data Processing Package API
# This file initializes the data_processing package and defines its public API
# for loading, cleaning and enriching the monthly practice records.

"""
Initializes the data_processing package, making key functions and classes
available at the top level for easier, cleaner imports in other modules.
"""

# --- Primary Data Loading Functions ---
# These functions return consistently cleaned and typed DataFrames, one per
# record kind exported by the data service.
from .loaders import (
    RECORD_SCHEMAS,
    DataLoader,
    prepare_records,
    records_to_frame,
    load_realisation,
    load_rendez_vous,
    load_jours_ouverts,
    load_devis
)

# --- Data Preparation & Cleaning ---
from .pipeline import DataPipeline

# --- Data Enrichment ---
from .enrichment import KPI_COLUMNS, build_monthly_kpis

# --- Numeric Helpers ---
from .helpers import convert_to_numeric, safe_divide, round_half_up, format_fr


# --- Define the Public API for the data_processing package ---
__all__ = [
    # --- Loading ---
    "RECORD_SCHEMAS",
    "DataLoader",
    "prepare_records",
    "records_to_frame",
    "load_realisation",
    "load_rendez_vous",
    "load_jours_ouverts",
    "load_devis",

    # --- Preparation ---
    "DataPipeline",

    # --- Enrichment ---
    "KPI_COLUMNS",
    "build_monthly_kpis",

    # --- Helpers ---
    "convert_to_numeric",
    "safe_divide",
    "round_half_up",
    "format_fr",
]
