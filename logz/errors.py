"""Error types raised by the ingestion and filtering engine."""


class LogzError(Exception):
    """Base class for every error the engine reports to the command line."""


class ConfigError(LogzError):
    def __init__(self, field: str, raw_value, cause: str):
        self.field = field
        self.raw_value = raw_value
        self.cause = cause
        super().__init__(f"Invalid {field} {raw_value!r}: {cause}")


class PathNotFoundError(LogzError, FileNotFoundError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Path not found: {path}")

    def __str__(self) -> str:
        return f"Path not found: {self.path}"


class LogIOError(LogzError):
    """Opening, reading, decompressing or re-statting a file failed."""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to read {path}: {cause}")


class CycleDetectedError(LogzError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Directory cycle detected at {path}")
