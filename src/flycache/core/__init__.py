"""FlyCache Core: configuration loading and binding."""

from flycache.core.config import Config, config_properties

__all__ = ["Config", "config_properties"]
