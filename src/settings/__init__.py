"""Settings package for NusaCerita.

- _paths.py: Path constant for the settings file
- _validation.py: Settings validation functions
- _settings.py: Main Settings dataclass
"""

from src.settings._paths import SETTINGS_FILE
from src.settings._settings import Settings
from src.settings._validation import LOG_LEVELS

__all__ = [
    "LOG_LEVELS",
    "SETTINGS_FILE",
    "Settings",
]
