"""Exception hierarchy for zhanzhuang."""


class ZhanZhuangError(Exception):
    """Base class for all zhanzhuang errors."""


class StorageError(ZhanZhuangError):
    """Raised when the persistent key-value store cannot be read or written."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"{key}: {message}")


class ConfigError(ZhanZhuangError):
    """Raised when the configuration file cannot be loaded or saved."""
