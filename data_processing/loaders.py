# efficience_root/data_processing/loaders.py
#
# Unified Record Loading Engine
# Turns the monthly records supplied by the data service (CSV snapshots or
# plain lists of documents) into cleaned, typed DataFrames. This is the
# validation boundary: nothing non-numeric gets past it into the analytics.

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Union

import pandas as pd

try:
    from config.settings import settings
    from .pipeline import DataPipeline
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in loaders.py: A core dependency is missing. {e}", exc_info=True)
    raise

logger = logging.getLogger(__name__)

# Column defaults per record kind. Numeric defaults also fix the column dtype.
RECORD_SCHEMAS: Dict[str, Dict[str, Any]] = {
    "realisation": {
        "praticien": "inconnu",
        "mois": "",
        "nb_patients": 0,
        "montant_facture": 0.0,
        "montant_encaisse": 0.0,
    },
    "rendez_vous": {
        "praticien": "inconnu",
        "mois": "",
        "nb_rdv": 0,
        "duree_totale_rdv": 0.0,
        "nb_patients": 0,
        "nb_nouveaux_patients": 0,
    },
    "jours_ouverts": {
        "praticien": "inconnu",
        "mois": "",
        "nb_heures": 0.0,  # minutes
    },
    "devis": {
        "praticien": "inconnu",
        "mois": "",
        "nb_devis": 0,
        "montant_propositions": 0.0,
        "nb_devis_acceptes": 0,
        "montant_accepte": 0.0,
    },
}


def prepare_records(df: pd.DataFrame, kind: str) -> pd.DataFrame:
    """Applies the standard cleaning pipeline for one record kind."""
    if kind not in RECORD_SCHEMAS:
        raise ValueError(f"Unknown record kind '{kind}'. Expected one of {sorted(RECORD_SCHEMAS)}.")
    schema = RECORD_SCHEMAS[kind]
    if df.empty:
        return pd.DataFrame(columns=list(schema.keys()))

    pipeline = (
        DataPipeline(df)
        .clean_column_names()
        .standardize_missing_values(schema)
        .validate_period_keys("mois")
    )
    df_processed = pipeline.get_df()
    df_processed["praticien"] = df_processed["praticien"].astype(str)
    return df_processed


def records_to_frame(
    records: Union[pd.DataFrame, Iterable[Mapping[str, Any]]],
    kind: str
) -> pd.DataFrame:
    """Accepts records as a DataFrame or a list of dicts and cleans them."""
    df = records if isinstance(records, pd.DataFrame) else pd.DataFrame(list(records))
    return prepare_records(df, kind)


class DataLoader:
    """
    Loads the monthly record snapshots from a directory. Missing or malformed
    files yield an empty, correctly-shaped DataFrame.
    """
    def __init__(self, data_source_dir: Path):
        self.base_dir = data_source_dir
        if not self.base_dir.exists():
            logger.warning(f"Data source directory not found: {self.base_dir}. Creating it.")
            self.base_dir.mkdir(parents=True, exist_ok=True)

    def _get_path(self, file_path: Path) -> Path:
        """Resolves a file path relative to the base data directory."""
        return self.base_dir / file_path if not file_path.is_absolute() else file_path

    def load_csv(self, file_path: Path, kind: str) -> pd.DataFrame:
        full_path = self._get_path(file_path)
        log_ctx = f"CSV({full_path.name})"
        logger.debug(f"[{log_ctx}] Attempting to load {kind} records from {full_path}")

        if not full_path.exists():
            logger.warning(f"[{log_ctx}] Source file not found. Returning empty DataFrame.")
            return prepare_records(pd.DataFrame(), kind)

        try:
            df = pd.read_csv(full_path, dtype={"mois": str}, low_memory=False)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            logger.error(f"[{log_ctx}] File is malformed or has encoding issues: {e}")
            return prepare_records(pd.DataFrame(), kind)

        df_processed = prepare_records(df, kind)
        logger.info(f"[{log_ctx}] Successfully loaded and cleaned {len(df_processed)} {kind} records.")
        return df_processed


_data_loader = DataLoader(settings.directories.data_sources)


def load_realisation() -> pd.DataFrame:
    """Loads invoiced/collected revenue and patients per practitioner and month."""
    return _data_loader.load_csv(settings.realisation_path, "realisation")

def load_rendez_vous() -> pd.DataFrame:
    """Loads booked appointments, seen and new patients per practitioner and month."""
    return _data_loader.load_csv(settings.rendez_vous_path, "rendez_vous")

def load_jours_ouverts() -> pd.DataFrame:
    """Loads worked time (minutes) per practitioner and month."""
    return _data_loader.load_csv(settings.jours_ouverts_path, "jours_ouverts")

def load_devis() -> pd.DataFrame:
    """Loads quotes issued and accepted per practitioner and month."""
    return _data_loader.load_csv(settings.devis_path, "devis")
