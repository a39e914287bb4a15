"""Error hierarchy for the aotscan discovery engine."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

__all__ = [
    "AotScanError",
    "ConfigNotFoundError",
    "ConfigError",
    "DiscoveryIOError",
    "DescriptorParseMiss",
    "NameResolutionFailure",
    "ClassFormatError",
    "ErrorCodes",
]


class AotScanError(Exception):
    """Base error for all aotscan errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details: dict[str, Any] = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ConfigNotFoundError(AotScanError):
    """Raised when a configuration file cannot be found."""

    def __init__(self, config_path: str, **kwargs: Any) -> None:
        super().__init__(
            code="CONFIG_NOT_FOUND",
            message=f"Configuration file not found: {config_path}",
            details={"config_path": config_path},
            **kwargs,
        )


class ConfigError(AotScanError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(code="CONFIG_INVALID", message=message, **kwargs)


class DiscoveryIOError(AotScanError):
    """Raised when a classpath root or archive cannot be opened or read.

    Fatal for the enclosing scan: a partial result set could leave required
    metadata unregistered.
    """

    def __init__(self, root: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            code="DISCOVERY_IO_ERROR",
            message=f"Cannot read classpath root '{root}': {reason}",
            details={"root": root, "reason": reason},
            **kwargs,
        )

    @property
    def root(self) -> str:
        """The classpath root that could not be read."""
        return self.details["root"]


class DescriptorParseMiss(AotScanError):
    """Raised when a descriptor file carries no entry class token."""

    def __init__(self, descriptor: str | None = None, **kwargs: Any) -> None:
        label = descriptor or "<text>"
        super().__init__(
            code="DESCRIPTOR_PARSE_MISS",
            message=f"No -H:Class token found in {label}",
            details={"descriptor": descriptor},
            **kwargs,
        )


class NameResolutionFailure(AotScanError):
    """Raised when a qualified name does not resolve to a loadable unit."""

    def __init__(self, name: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            code="NAME_RESOLUTION_FAILURE",
            message=f"Cannot resolve '{name}': {reason}",
            details={"name": name, "reason": reason},
            **kwargs,
        )

    @property
    def name(self) -> str:
        """The name that failed to resolve."""
        return self.details["name"]


class ClassFormatError(NameResolutionFailure):
    """Raised when unit bytes are not a well-formed class file."""

    def __init__(self, name: str, reason: str, **kwargs: Any) -> None:
        super().__init__(name=name, reason=reason, **kwargs)
        self.code = "CLASS_FORMAT_ERROR"


class ErrorCodes:
    """All error codes as constants.

    Use these instead of hardcoding error code strings.

    Example:
        if error.code == ErrorCodes.DISCOVERY_IO_ERROR:
            abort_build()
    """

    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    CONFIG_INVALID = "CONFIG_INVALID"
    DISCOVERY_IO_ERROR = "DISCOVERY_IO_ERROR"
    DESCRIPTOR_PARSE_MISS = "DESCRIPTOR_PARSE_MISS"
    NAME_RESOLUTION_FAILURE = "NAME_RESOLUTION_FAILURE"
    CLASS_FORMAT_ERROR = "CLASS_FORMAT_ERROR"

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("ErrorCodes is immutable")
