# efficience_root/config/settings.py
#
# Centralized Application Configuration
# Defines every tunable of the analytics core with Pydantic models. Values are
# loaded from environment variables or a .env file, so thresholds and the
# AI kill switch can be changed per deployment without code edits.

import logging
from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Define Project Root ---
PROJECT_ROOT = Path(__file__).resolve().parent.parent

settings_logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# 1. NESTED CONFIGURATION MODELS
# -----------------------------------------------------------------------------

class AppConfig(BaseModel):
    """Core application metadata and logging settings."""
    name: str = "Efficience Analytics"
    version: str = "1.0.0"
    organization_name: str = "Efficience Dentaire"

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: str = "%(asctime)s - %(name)s.%(funcName)s - %(levelname)s - %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"


class DirectoryConfig(BaseModel):
    """Manages the key directory paths, ensuring they exist."""
    root: Path = PROJECT_ROOT
    data_sources: Path = root / "data_sources"

    @model_validator(mode='after')
    def create_directories(self) -> 'DirectoryConfig':
        """Ensure the data source directory exists on initialization."""
        self.data_sources.mkdir(parents=True, exist_ok=True)
        return self


class ModelConfig(BaseModel):
    """Parameters of the statistical models and the global AI switch."""
    ai_enabled: bool = True

    smoothing_alpha: float = 0.3
    holt_alpha: float = 0.3
    holt_beta: float = 0.1

    # Holt parameters used inside the blended forecast.
    forecast_alpha: float = 0.4
    forecast_beta: float = 0.15
    forecast_weight_floor: float = 0.3
    forecast_weight_ceiling: float = 0.7
    forecast_steps: int = 3

    anomaly_threshold: float = 2.0
    anomaly_min_points: int = 3
    moving_average_window: int = 3


class TrendThresholdConfig(BaseModel):
    """Thresholds used to turn numbers into qualitative labels."""
    directional_pct_of_mean: float = 0.02
    strong_pct_of_mean: float = 0.05

    # Period-over-period (last two months) Hausse/Baisse threshold, in percent.
    period_change_pct: float = 5.0

    # Simple insight: average forecast vs last value band.
    simple_forecast_band: float = 0.05
    reliable_confidence: int = 70
    moderate_confidence: int = 40


class HealthScoreConfig(BaseModel):
    """Weights and normalization constants of the multi-KPI health score."""
    weights: Dict[str, float] = {
        "encaissement": 0.30,
        "evolution": 0.25,
        "absence": 0.15,
        "production": 0.20,
        "nouveaux": 0.10,
    }
    evolution_center: float = 50.0
    evolution_factor: float = 2.0
    absence_factor: float = 5.0
    production_benchmark: float = 400.0
    nouveaux_factor: float = 5.0

    excellent_min: float = 80.0
    bon_min: float = 65.0
    moyen_min: float = 50.0

    @model_validator(mode='after')
    def check_weights(self) -> 'HealthScoreConfig':
        """Weights must cover the five criteria and sum to 1.0."""
        expected = {"encaissement", "evolution", "absence", "production", "nouveaux"}
        if set(self.weights) != expected:
            raise ValueError(f"Health score weights must define exactly {sorted(expected)}")
        if abs(sum(self.weights.values()) - 1.0) > 1e-9:
            raise ValueError(f"Health score weights must sum to 1.0, got {sum(self.weights.values())}")
        return self


class ThemeConfig(BaseModel):
    """Colours for the chart overlays."""
    primary: str = "#2563EB"
    background: str = "#F8FAFC"
    secondary_background: str = "#FFFFFF"
    text: str = "#1F2937"

    trend_line: str = "#8B5CF6"
    forecast: str = "#F59E0B"
    anomaly: str = "#EF4444"

    level_excellent: str = "#16A34A"
    level_bon: str = "#2563EB"
    level_moyen: str = "#EAB308"
    level_critique: str = "#F97316"

    @computed_field
    @property
    def plotly_colorway(self) -> List[str]:
        """Default categorical color sequence for Plotly charts."""
        return ["#2563EB", "#14B8A6", "#8B5CF6", "#F59E0B", "#EF4444", "#6B7280"]


# -----------------------------------------------------------------------------
# 2. MAIN SETTINGS CLASS
# -----------------------------------------------------------------------------

class Settings(BaseSettings):
    """
    Main settings class for Efficience Analytics.
    Aggregates all configuration models and loads from environment variables,
    e.g. EFFICIENCE_MODELS__AI_ENABLED=false.
    """
    model_config = SettingsConfigDict(
        env_prefix='EFFICIENCE_',
        case_sensitive=False,
        env_nested_delimiter='__',
        env_file=f"{PROJECT_ROOT}/.env",
        extra='ignore'
    )

    app: AppConfig = Field(default_factory=AppConfig)
    directories: DirectoryConfig = Field(default_factory=DirectoryConfig)
    models: ModelConfig = Field(default_factory=ModelConfig)
    thresholds: TrendThresholdConfig = Field(default_factory=TrendThresholdConfig)
    health: HealthScoreConfig = Field(default_factory=HealthScoreConfig)
    theme: ThemeConfig = Field(default_factory=ThemeConfig)

    # --- Monthly record snapshots exported by the data service ---
    realisation_path: Path = Path("analyse_realisation.csv")
    rendez_vous_path: Path = Path("analyse_rendez_vous.csv")
    jours_ouverts_path: Path = Path("analyse_jours_ouverts.csv")
    devis_path: Path = Path("analyse_devis.csv")


def configure_logging(app_config: Optional[AppConfig] = None) -> None:
    """Sets up global logging from the application settings."""
    app_config = app_config or settings.app
    logging.basicConfig(
        level=app_config.log_level,
        format=app_config.log_format,
        datefmt=app_config.log_date_format,
        force=True
    )


# -----------------------------------------------------------------------------
# 3. SINGLETON INSTANCE
# -----------------------------------------------------------------------------

try:
    settings = Settings()
    settings_logger.info(
        f"Settings loaded for '{settings.app.name}' v{settings.app.version}. "
        f"LOG_LEVEL={settings.app.log_level}. AI_ENABLED={settings.models.ai_enabled}"
    )
    if not settings.models.ai_enabled:
        settings_logger.warning("AI models are disabled by configuration. All analyses will return neutral results.")
except Exception as e:
    settings_logger.critical(f"FATAL: Could not initialize application settings. Error: {e}", exc_info=True)
    raise
