# efficience_root/data_processing/pipeline.py
#
# Fluent Data Processing Pipeline
# A chainable class for the cleaning steps applied to monthly records before
# they reach the aggregation layer: column names, numeric coercion and
# validation of the YYYYMM period keys.

import logging
from collections import Counter
from typing import Any, Dict

import numpy as np
import pandas as pd

try:
    from .helpers import convert_to_numeric, _NA_REGEX_PATTERN
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in pipeline.py: could not import helpers. {e}", exc_info=True)
    raise

logger = logging.getLogger(__name__)

_PERIOD_PATTERN = r'^\d{4}(?:0[1-9]|1[0-2])$'


class DataPipeline:
    """
    A fluent interface for applying a sequence of data processing operations.
    Enables expressive, readable, and chainable cleaning pipelines.
    """
    def __init__(self, df: pd.DataFrame):
        if not isinstance(df, pd.DataFrame):
            raise TypeError("DataPipeline must be initialized with a pandas DataFrame.")
        self._df = df.copy()

    def get_df(self) -> pd.DataFrame:
        """Returns the processed DataFrame."""
        return self._df

    def clean_column_names(self) -> 'DataPipeline':
        """Standardizes column names to snake_case (montantFacture -> montant_facture)."""
        if self._df.columns.empty:
            return self
        new_cols = (
            self._df.columns.astype(str)
            .str.replace(r'(?<=[a-z0-9])(?=[A-Z])', '_', regex=True)
            .str.lower().str.strip()
            .str.replace(r'[^0-9a-z_]+', '_', regex=True)
            .str.replace(r'_{2,}', '_', regex=True).str.strip('_')
        )
        new_cols = [f"unnamed_col_{i}" if not name else name for i, name in enumerate(new_cols)]

        counts = Counter(new_cols)
        if max(counts.values(), default=0) > 1:
            seen = Counter()
            final_cols = []
            for col_name in new_cols:
                if counts[col_name] > 1:
                    final_cols.append(f"{col_name}_{seen[col_name]}")
                    seen[col_name] += 1
                else:
                    final_cols.append(col_name)
            self._df.columns = final_cols
        else:
            self._df.columns = new_cols
        return self

    def standardize_missing_values(self, column_defaults: Dict[str, Any]) -> 'DataPipeline':
        """
        Replaces the various 'Not Available' formats and fills with the provided
        defaults. Columns absent from the frame are created with their default.
        """
        if not column_defaults:
            return self
        for col, default_val in column_defaults.items():
            if col not in self._df.columns:
                self._df[col] = default_val
                continue
            series = self._df[col]
            if isinstance(default_val, (int, float, np.number)):
                target_type = int if isinstance(default_val, int) else float
                self._df[col] = convert_to_numeric(series, default_value=default_val, target_type=target_type)
            else:
                series_obj = series.astype(object).replace(_NA_REGEX_PATTERN, np.nan, regex=True)
                self._df[col] = series_obj.fillna(str(default_val))
        return self

    def validate_period_keys(self, period_col: str = 'mois') -> 'DataPipeline':
        """
        Normalizes YYYYMM period keys to strings and drops rows whose key is
        missing or not a valid month, so that lexical order is chronological.
        """
        if period_col not in self._df.columns:
            logger.warning(f"Period validation skipped: Column '{period_col}' not found.")
            return self
        keys = (
            self._df[period_col].astype(str).str.strip()
            .str.replace(r'\.0$', '', regex=True)
            .str.replace('-', '', regex=False)
        )
        valid = keys.str.match(_PERIOD_PATTERN, na=False)
        dropped = int((~valid).sum())
        if dropped:
            logger.warning(f"Dropping {dropped} record(s) with an invalid '{period_col}' period key.")
        self._df[period_col] = keys
        self._df = self._df[valid].reset_index(drop=True)
        return self
