from .loader import ConfigError, ConverterConfig, ProtocolSpec, SheetNames, load_config

__all__ = [
    "ConfigError",
    "ConverterConfig",
    "ProtocolSpec",
    "SheetNames",
    "load_config",
]
