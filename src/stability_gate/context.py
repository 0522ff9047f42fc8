"""The run flavor for one test session, resolved once and then cached."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Callable, Optional, Union

from .classifier import resolve_run_flavor
from .flavors import RunFlavor
from .gate import RequirementLike, should_run

if TYPE_CHECKING:
    from .config import StabilitySettings

logger = logging.getLogger(__name__)

BuildSource = Union[str, Callable[[], Optional[str]], None]


def _read(source: BuildSource) -> Optional[str]:
    if callable(source):
        return source()
    return source


class RunFlavorContext:
    """
    Holds the inputs for flavor resolution and the memoized result.

    Build identifiers may be plain strings or zero-argument callables. The
    callables are only invoked when no override is configured, and at most
    once per successful resolution. A failed resolution is not cached.
    """

    def __init__(
        self,
        override: Optional[str] = None,
        app_build: BuildSource = None,
        platform_build: BuildSource = None,
    ) -> None:
        self.override = override
        self._app_build = app_build
        self._platform_build = platform_build
        self._flavor: Optional[RunFlavor] = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: StabilitySettings) -> "RunFlavorContext":
        return cls(
            override=settings.flavor,
            app_build=settings.app_build,
            platform_build=settings.platform_build,
        )

    @property
    def is_resolved(self) -> bool:
        return self._flavor is not None

    @property
    def flavor(self) -> RunFlavor:
        flavor = self._flavor
        if flavor is not None:
            return flavor
        with self._lock:
            if self._flavor is None:
                self._flavor = self._resolve()
            return self._flavor

    def _resolve(self) -> RunFlavor:
        if self.override is not None:
            flavor = resolve_run_flavor(self.override, None, None)
        else:
            flavor = resolve_run_flavor(
                None, _read(self._app_build), _read(self._platform_build)
            )
        logger.info("Run flavor: %s", flavor.name)
        return flavor

    def should_run(
        self, requirement: Optional[RequirementLike], display_name: Optional[str] = None
    ) -> bool:
        if requirement is None:
            return True
        return should_run(requirement, self.flavor, display_name=display_name)
