"""Run-flavor stability gate for pytest."""

from .classifier import (
    AppBuildCategory,
    BuildClassification,
    PlatformBuildCategory,
    classify_app_build,
    classify_build,
    classify_platform_build,
    flavor_for,
    resolve_run_flavor,
)
from .config import StabilitySettings
from .context import RunFlavorContext
from .exceptions import (
    AmbiguousFlavorError,
    InvalidRequirementError,
    MalformedAppBuildError,
    MalformedPlatformBuildError,
    MissingBuildInfoError,
    StabilityConfigurationError,
    StabilityError,
    UnrecognizedFlavorError,
    UnrecognizedOverrideError,
)
from .flavors import (
    ALL_FLAVORS,
    FLAVORS_BY_NAME,
    RunFlavor,
    describe_mask,
    lookup_flavor,
    parse_flavor_mask,
)
from .gate import StabilityRequirement, select, should_run

__all__ = [
    "ALL_FLAVORS",
    "AmbiguousFlavorError",
    "AppBuildCategory",
    "BuildClassification",
    "FLAVORS_BY_NAME",
    "InvalidRequirementError",
    "MalformedAppBuildError",
    "MalformedPlatformBuildError",
    "MissingBuildInfoError",
    "PlatformBuildCategory",
    "RunFlavor",
    "RunFlavorContext",
    "StabilityConfigurationError",
    "StabilityError",
    "StabilityRequirement",
    "StabilitySettings",
    "UnrecognizedFlavorError",
    "UnrecognizedOverrideError",
    "classify_app_build",
    "classify_build",
    "classify_platform_build",
    "describe_mask",
    "flavor_for",
    "lookup_flavor",
    "parse_flavor_mask",
    "resolve_run_flavor",
    "select",
    "should_run",
]
