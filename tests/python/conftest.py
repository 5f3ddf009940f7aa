import pytest

from data_processing.loaders import records_to_frame


@pytest.fixture
def realisation():
    return records_to_frame([
        {"praticien": "A", "mois": "202401", "nbPatients": 10, "montantFacture": 1000, "montantEncaisse": 900},
        {"praticien": "A", "mois": "202402", "nbPatients": 12, "montantFacture": 1100, "montantEncaisse": 1100},
        {"praticien": "B", "mois": "202401", "nbPatients": 5, "montantFacture": 500, "montantEncaisse": 250},
        {"praticien": "B", "mois": "202402", "nbPatients": 5, "montantFacture": 600, "montantEncaisse": 600},
    ], "realisation")


@pytest.fixture
def rendez_vous():
    return records_to_frame([
        {"praticien": "A", "mois": "202401", "nbRdv": 20, "nbPatients": 18, "nbNouveauxPatients": 2},
        {"praticien": "A", "mois": "202402", "nbRdv": 20, "nbPatients": 16, "nbNouveauxPatients": 4},
    ], "rendez_vous")


@pytest.fixture
def jours_ouverts():
    # Worked time is exported in minutes.
    return records_to_frame([
        {"praticien": "A", "mois": "202401", "nbHeures": 600},
        {"praticien": "A", "mois": "202402", "nbHeures": 660},
    ], "jours_ouverts")
