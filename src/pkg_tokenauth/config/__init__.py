from .env import parse_duration, settings_from_env
from .settings import TokenSettings

__all__ = ["TokenSettings", "parse_duration", "settings_from_env"]
