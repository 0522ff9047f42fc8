"""
Run-flavor classification from build identifiers.

The application build identifier and the platform build identifier are each
matched against a fixed grammar. The two resulting categories are then
combined through a closed decision table into exactly one ``RunFlavor``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import re
from typing import FrozenSet, Optional

from .exceptions import (
    AmbiguousFlavorError,
    MalformedAppBuildError,
    MalformedPlatformBuildError,
    MissingBuildInfoError,
    UnrecognizedFlavorError,
)
from .flavors import RunFlavor, lookup_flavor

logger = logging.getLogger(__name__)

LOCAL_BUILD_SENTINEL = "BuildFromAndroidStudio"

_REV = r"(?:[0-9]+|[A-Z])"

APP_BUILD_PATTERN = re.compile(
    r"(?:"
    rf"(?P<local>{re.escape(LOCAL_BUILD_SENTINEL)}|{_REV}-eng\.[a-z]+\.[0-9]+\.[0-9]+)"
    rf"|(?P<presubmit>{_REV}-P[0-9]+)"
    rf"|(?P<postsubmit>{_REV}-[0-9]+)"
    rf"|(?P<platform>{_REV})"
    r")"
)

PLATFORM_BUILD_PATTERN = re.compile(
    r"(?:"
    r"(?P<command_line>eng\.[a-z]+\.[0-9]+\.[0-9]+)"
    r"|(?P<presubmit>P[0-9]+)"
    r"|(?P<postsubmit>[0-9]+)"
    r")"
)


class AppBuildCategory(str, Enum):
    """Named branches of the application build grammar."""

    LOCAL = "local"
    PRESUBMIT = "presubmit"
    POSTSUBMIT = "postsubmit"
    PLATFORM = "platform"


class PlatformBuildCategory(str, Enum):
    """Named branches of the platform build grammar."""

    COMMAND_LINE = "command_line"
    PRESUBMIT = "presubmit"
    POSTSUBMIT = "postsubmit"


@dataclass(frozen=True)
class DecisionRule:
    app: AppBuildCategory
    platforms: FrozenSet[PlatformBuildCategory]
    flavor: RunFlavor

    def matches(self, app: AppBuildCategory, platform: PlatformBuildCategory) -> bool:
        return app is self.app and platform in self.platforms


DECISION_TABLE: tuple[DecisionRule, ...] = (
    DecisionRule(
        AppBuildCategory.LOCAL,
        frozenset({PlatformBuildCategory.COMMAND_LINE, PlatformBuildCategory.POSTSUBMIT}),
        RunFlavor.LOCAL,
    ),
    DecisionRule(
        AppBuildCategory.PRESUBMIT,
        frozenset({PlatformBuildCategory.POSTSUBMIT}),
        RunFlavor.UNBUNDLED_PRESUBMIT,
    ),
    DecisionRule(
        AppBuildCategory.POSTSUBMIT,
        frozenset({PlatformBuildCategory.POSTSUBMIT}),
        RunFlavor.UNBUNDLED_POSTSUBMIT,
    ),
    DecisionRule(
        AppBuildCategory.PLATFORM,
        frozenset({PlatformBuildCategory.PRESUBMIT}),
        RunFlavor.PLATFORM_PRESUBMIT,
    ),
    DecisionRule(
        AppBuildCategory.PLATFORM,
        frozenset({PlatformBuildCategory.POSTSUBMIT}),
        RunFlavor.PLATFORM_POSTSUBMIT,
    ),
)


@dataclass(frozen=True)
class BuildClassification:
    """Both build categories together with the flavor they produce."""

    app_build: str
    platform_build: str
    app_category: AppBuildCategory
    platform_category: PlatformBuildCategory
    flavor: RunFlavor


def _matched_branch(match: re.Match[str]) -> str:
    # Branches are mutually exclusive, so exactly one group is set.
    branches = [name for name, value in match.groupdict().items() if value is not None]
    return branches[0]


def classify_app_build(app_build: str) -> AppBuildCategory:
    match = APP_BUILD_PATTERN.fullmatch(app_build)
    if match is None:
        raise MalformedAppBuildError(app_build)
    return AppBuildCategory(_matched_branch(match))


def classify_platform_build(platform_build: str) -> PlatformBuildCategory:
    match = PLATFORM_BUILD_PATTERN.fullmatch(platform_build)
    if match is None:
        raise MalformedPlatformBuildError(platform_build)
    return PlatformBuildCategory(_matched_branch(match))


def flavor_for(
    app_category: AppBuildCategory,
    platform_category: PlatformBuildCategory,
    table: tuple[DecisionRule, ...] = DECISION_TABLE,
) -> RunFlavor:
    """
    Look up the flavor for a category pair.

    The table is treated as closed: a pair matching no rule is an
    ``UnrecognizedFlavorError`` and a pair matching several rules is an
    ``AmbiguousFlavorError``. Rule order never decides the outcome.
    """
    details = {
        "app_category": app_category.value,
        "platform_category": platform_category.value,
    }
    matches = [rule for rule in table if rule.matches(app_category, platform_category)]
    if not matches:
        raise UnrecognizedFlavorError(details=details)
    if len(matches) > 1:
        raise AmbiguousFlavorError(
            "Ambiguous run flavor: "
            + ", ".join(str(rule.flavor.name) for rule in matches),
            details={**details, "flavors": [rule.flavor.name for rule in matches]},
        )
    return matches[0].flavor


def classify_build(
    app_build: Optional[str], platform_build: Optional[str]
) -> BuildClassification:
    """Classify both identifiers and combine them into a flavor."""
    if app_build is None:
        raise MissingBuildInfoError("app_build")
    if platform_build is None:
        raise MissingBuildInfoError("platform_build")
    logger.debug("App build: %s, platform build: %s", app_build, platform_build)
    app_category = classify_app_build(app_build)
    platform_category = classify_platform_build(platform_build)
    flavor = flavor_for(app_category, platform_category)
    logger.debug(
        "%s x %s -> %s", app_category.value, platform_category.value, flavor.name
    )
    return BuildClassification(
        app_build=app_build,
        platform_build=platform_build,
        app_category=app_category,
        platform_category=platform_category,
        flavor=flavor,
    )


def resolve_run_flavor(
    override: Optional[str],
    app_build: Optional[str],
    platform_build: Optional[str],
) -> RunFlavor:
    """
    Determine the run flavor.

    A non-``None`` override wins outright and the build identifiers are not
    examined. Otherwise both identifiers are required and classified.
    """
    if override is not None:
        logger.debug("Flavor override: %s", override)
        return lookup_flavor(override)
    return classify_build(app_build, platform_build).flavor
