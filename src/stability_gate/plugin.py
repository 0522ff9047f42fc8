"""
pytest plugin that gates tests on the current run flavor.

Mark a test with ``@pytest.mark.stability(flavors=...)`` to run it only under
the listed flavors::

    @pytest.mark.stability(flavors=RunFlavor.LOCAL | RunFlavor.PLATFORM_PRESUBMIT)
    def test_launcher_smoke():
        ...

Unmarked tests always run. The run flavor is resolved at most once per
session, and only if some collected test carries the marker or requests
the ``run_flavor`` fixture.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from pydantic import ValidationError
import pytest

from .config import StabilitySettings, describe_settings_error
from .context import RunFlavorContext
from .exceptions import StabilityError
from .flavors import RunFlavor, describe_mask
from .gate import StabilityRequirement, select

logger = logging.getLogger(__name__)

MARKER_NAME = "stability"
FIXTURE_NAME = "run_flavor"

context_key = pytest.StashKey[RunFlavorContext]()
skip_mode_key = pytest.StashKey[str]()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("stability", "run-flavor stability gate")
    group.addoption(
        "--stability-flavor",
        dest="stability_flavor",
        default=None,
        help="Force the run flavor by name, e.g. UNBUNDLED_POSTSUBMIT (env: STABILITY_FLAVOR)",
    )
    group.addoption(
        "--stability-app-build",
        dest="stability_app_build",
        default=None,
        help="Application build identifier (env: STABILITY_APP_BUILD)",
    )
    group.addoption(
        "--stability-platform-build",
        dest="stability_platform_build",
        default=None,
        help="Platform build identifier (env: STABILITY_PLATFORM_BUILD)",
    )
    group.addoption(
        "--stability-skip-mode",
        dest="stability_skip_mode",
        choices=("skip", "deselect"),
        default=None,
        help="Report ineligible tests as skipped or drop them from the run "
        "(env: STABILITY_SKIP_MODE, default: skip)",
    )


def _option(config: pytest.Config, name: str, fallback: Optional[str]) -> Optional[str]:
    value = config.getoption(name)
    return fallback if value is None else value


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        f"{MARKER_NAME}(flavors): run the test only under the given run flavors "
        "(RunFlavor mask, int, or names joined with '|')",
    )

    try:
        settings = StabilitySettings()
    except ValidationError as exc:
        raise pytest.UsageError(describe_settings_error(exc)) from exc
    config.stash[context_key] = RunFlavorContext(
        override=_option(config, "stability_flavor", settings.flavor),
        app_build=_option(config, "stability_app_build", settings.app_build),
        platform_build=_option(config, "stability_platform_build", settings.platform_build),
    )
    config.stash[skip_mode_key] = _option(config, "stability_skip_mode", settings.skip_mode) or "skip"


def requirement_for(item: pytest.Item) -> Optional[StabilityRequirement]:
    marker = item.get_closest_marker(MARKER_NAME)
    if marker is None:
        return None
    if "flavors" in marker.kwargs:
        value = marker.kwargs["flavors"]
    elif marker.args:
        value = marker.args[0]
    else:
        raise pytest.UsageError(f"{item.nodeid}: @{MARKER_NAME} marker requires flavors")
    try:
        return StabilityRequirement.of(value)
    except StabilityError as exc:
        raise pytest.UsageError(f"{item.nodeid}: {exc.message}") from exc


def _session_flavor(config: pytest.Config) -> RunFlavor:
    try:
        return config.stash[context_key].flavor
    except StabilityError as exc:
        raise pytest.UsageError(f"Cannot determine run flavor: {exc.message}") from exc


def pytest_collection_modifyitems(
    session: pytest.Session, config: pytest.Config, items: List[pytest.Item]
) -> None:
    requirements: Dict[str, StabilityRequirement] = {}
    for item in items:
        requirement = requirement_for(item)
        if requirement is not None:
            requirements[item.nodeid] = requirement
    uses_fixture = any(FIXTURE_NAME in getattr(item, "fixturenames", ()) for item in items)
    if not requirements and not uses_fixture:
        return

    flavor = _session_flavor(config)
    if not requirements:
        return
    selected, deselected = select(
        items,
        flavor,
        requirement_of=lambda item: requirements.get(item.nodeid),
        name_of=lambda item: item.nodeid,
    )
    if not deselected:
        return

    logger.info(
        "%d of %d tests not eligible under %s", len(deselected), len(items), flavor.name
    )
    if config.stash[skip_mode_key] == "deselect":
        config.hook.pytest_deselected(items=deselected)
        items[:] = selected
        return

    for item in deselected:
        item.add_marker(
            pytest.mark.skip(
                reason=(
                    f"requires run flavor {requirements[item.nodeid]}, "
                    f"current flavor is {describe_mask(flavor)}"
                )
            )
        )


def pytest_report_collectionfinish(config: pytest.Config) -> Optional[str]:
    context = config.stash.get(context_key, None)
    if context is None or not context.is_resolved:
        return None
    return f"stability flavor: {describe_mask(context.flavor)}"


@pytest.fixture(scope="session")
def run_flavor(pytestconfig: pytest.Config) -> RunFlavor:
    """The run flavor of this session."""
    return _session_flavor(pytestconfig)
