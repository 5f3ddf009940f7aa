# efficience_root/data_processing/enrichment.py
#
# Builds the per-practitioner monthly KPI table from the cleaned record kinds
# and adds the derived ratio columns (collection rate, absence rate, hourly
# production, average basket).

import logging
from typing import Optional

import numpy as np
import pandas as pd

try:
    from .helpers import safe_divide
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in enrichment.py: A core dependency is missing. {e}", exc_info=True)
    raise

logger = logging.getLogger(__name__)

KPI_COLUMNS = [
    "praticien", "mois", "ca_facture", "ca_encaisse", "nb_patients", "panier_moyen",
    "rentabilite_horaire", "heures_travaillees", "nb_rdv", "nb_patients_rdv",
    "nb_nouveaux_patients", "nb_absences", "taux_encaissement", "taux_absence",
]

_KEYS = ["praticien", "mois"]


def _ratio(num: pd.Series, den: pd.Series, scale: float = 1.0) -> pd.Series:
    """Element-wise safe division; zero denominators give 0."""
    return pd.Series(
        [safe_divide(n, d) * scale for n, d in zip(num, den)],
        index=num.index, dtype=float
    )


def build_monthly_kpis(
    df_realisation: pd.DataFrame,
    df_rendez_vous: Optional[pd.DataFrame] = None,
    df_jours_ouverts: Optional[pd.DataFrame] = None,
    praticien: Optional[str] = None
) -> pd.DataFrame:
    """
    Joins the monthly record kinds into one KPI row per practitioner and month.

    Months come from the realisation records; appointment and worked-time data
    are matched on (praticien, mois) and default to 0 when absent. Worked time
    is stored in minutes and reported in hours.
    """
    if not isinstance(df_realisation, pd.DataFrame) or df_realisation.empty:
        return pd.DataFrame(columns=KPI_COLUMNS)

    real = df_realisation
    if praticien is not None:
        real = real[real["praticien"] == praticien]
        if real.empty:
            logger.info(f"No realisation records for practitioner '{praticien}'.")
            return pd.DataFrame(columns=KPI_COLUMNS)

    df = real.groupby(_KEYS, as_index=False).agg(
        ca_facture=("montant_facture", "sum"),
        ca_encaisse=("montant_encaisse", "sum"),
        nb_patients=("nb_patients", "sum"),
    )

    if df_rendez_vous is not None and not df_rendez_vous.empty:
        rdv = df_rendez_vous.groupby(_KEYS, as_index=False).agg(
            nb_rdv=("nb_rdv", "sum"),
            nb_patients_rdv=("nb_patients", "sum"),
            nb_nouveaux_patients=("nb_nouveaux_patients", "sum"),
        )
        df = pd.merge(df, rdv, on=_KEYS, how="left")
    if df_jours_ouverts is not None and not df_jours_ouverts.empty:
        heures = df_jours_ouverts.groupby(_KEYS, as_index=False).agg(minutes=("nb_heures", "sum"))
        df = pd.merge(df, heures, on=_KEYS, how="left")

    for col in ["nb_rdv", "nb_patients_rdv", "nb_nouveaux_patients", "minutes"]:
        df[col] = df[col].fillna(0) if col in df.columns else 0

    df["heures_travaillees"] = (df["minutes"].astype(float) / 60).round(1)
    df["panier_moyen"] = _ratio(df["ca_facture"], df["nb_patients"]).round(2)
    df["rentabilite_horaire"] = _ratio(df["ca_facture"], df["minutes"].astype(float) / 60).round(2)
    df["nb_absences"] = np.maximum(0, df["nb_rdv"] - df["nb_patients_rdv"])
    df["taux_encaissement"] = _ratio(df["ca_encaisse"], df["ca_facture"], scale=100)
    df["taux_absence"] = _ratio(df["nb_absences"], df["nb_rdv"], scale=100)

    return df.sort_values(_KEYS).reset_index(drop=True)[KPI_COLUMNS]
