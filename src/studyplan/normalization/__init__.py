"""Input normalization."""

from .config_resolver import DEFAULT_SETTINGS, normalize_setting_keys, resolve_effective_settings
from .request import normalize_request

__all__ = ["DEFAULT_SETTINGS", "normalize_request", "normalize_setting_keys", "resolve_effective_settings"]
