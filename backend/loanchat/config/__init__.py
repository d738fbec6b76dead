from .config import (
    Config,
    Settings,
    GenerationConfig,
    LoggingConfig,
    WidgetConfig,
)

__all__ = [
    "Config",
    "Settings",
    "GenerationConfig",
    "LoggingConfig",
    "WidgetConfig",
]
