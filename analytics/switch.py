# efficience_root/analytics/switch.py
#
# AI kill switch. A small feature-flag object that every analytics function
# accepts through its `switch` keyword. Callers that do not pass one read the
# process default, seeded from `settings.models.ai_enabled`.

import logging
from typing import Optional

try:
    from config.settings import settings
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in switch.py: Settings could not be imported. {e}", exc_info=True)
    raise

logger = logging.getLogger(__name__)

AI_DISABLED_MSG = "⛔ Les analyses IA sont actuellement désactivées par l'administrateur."


class AISwitch:
    """
    Enable/disable flag for the analytics models.

    The value is read without locking; a call already in flight may observe
    either the old or the new value after a toggle.
    """
    def __init__(self, enabled: bool = True):
        self._enabled = bool(enabled)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, value: bool) -> None:
        self._enabled = bool(value)
        logger.info(f"AI models {'enabled' if self._enabled else 'disabled'}.")

    def __repr__(self) -> str:
        return f"AISwitch(enabled={self._enabled})"


default_switch = AISwitch(settings.models.ai_enabled)


def resolve_switch(switch: Optional[AISwitch] = None) -> AISwitch:
    return switch if switch is not None else default_switch


def set_ai_enabled(value: bool) -> None:
    """Toggles the process-wide default switch."""
    default_switch.set_enabled(value)


def is_ai_enabled(switch: Optional[AISwitch] = None) -> bool:
    return resolve_switch(switch).enabled
