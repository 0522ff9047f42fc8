"""
Errors raised while classifying the run flavor.

Every error here is fatal to the test run. A classification failure means the
test environment is misconfigured, so nothing catches and retries them; the
pytest plugin and the CLI only translate them into a usage error or an exit
code.
"""

from typing import Any, Dict, Optional


class StabilityError(Exception):
    """Base exception for all run-flavor errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class StabilityConfigurationError(StabilityError):
    """Raised when build identifiers or requirements are malformed."""


class MalformedAppBuildError(StabilityConfigurationError):
    """Raised when the application build identifier matches no known form."""

    def __init__(self, app_build: str) -> None:
        super().__init__(
            f"App build match not found: {app_build!r}",
            details={"app_build": app_build},
        )


class MalformedPlatformBuildError(StabilityConfigurationError):
    """Raised when the platform build identifier matches no known form."""

    def __init__(self, platform_build: str) -> None:
        super().__init__(
            f"Platform build match not found: {platform_build!r}",
            details={"platform_build": platform_build},
        )


class MissingBuildInfoError(StabilityConfigurationError):
    """Raised when a build identifier is needed but was never supplied."""

    def __init__(self, field: str) -> None:
        super().__init__(
            f"No {field.replace('_', ' ')} identifier configured "
            f"(set STABILITY_{field.upper()} or pass it on the command line)",
            details={"field": field},
        )


class InvalidRequirementError(StabilityConfigurationError):
    """Raised when a declared stability requirement cannot be parsed."""


class UnrecognizedFlavorError(StabilityError):
    """Raised when the app/platform categories combine into no known flavor."""

    def __init__(
        self,
        message: str = "Unrecognized run flavor",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details)


class AmbiguousFlavorError(UnrecognizedFlavorError):
    """Raised when more than one decision rule matches a combination."""


class UnrecognizedOverrideError(StabilityError, LookupError):
    """Raised when the flavor override names no known flavor."""

    def __init__(self, override: str) -> None:
        super().__init__(
            f"Unrecognized run flavor override: {override}",
            details={"override": override},
        )
