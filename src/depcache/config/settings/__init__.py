"""Config settings – 12-factor env-based configuration."""
from depcache.config.settings.base import Settings
from depcache.config.settings.loaders import EnvSettingsLoader, SettingsLoader
from depcache.config.settings.redis import RedisCacheSettings

__all__ = ["EnvSettingsLoader", "RedisCacheSettings", "Settings", "SettingsLoader"]
