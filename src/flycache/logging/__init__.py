"""FlyCache Logging: hexagonal logging port and adapters."""

from flycache.logging.port import LoggingPort
from flycache.logging.stdlib_adapter import StdlibLoggingAdapter
from flycache.logging.structlog_adapter import StructlogAdapter

__all__ = ["LoggingPort", "StdlibLoggingAdapter", "StructlogAdapter"]
