#!/usr/bin/env python3
"""
stability-flavor: report the run flavor for the current build environment.

Usage:
    stability-flavor --app-build 5-P100 --platform-build 9999
    stability-flavor --flavor PLATFORM_POSTSUBMIT --json
    stability-flavor --check "LOCAL|PLATFORM_PRESUBMIT"   # exit 0 = run, 3 = skip

Inputs fall back to STABILITY_FLAVOR, STABILITY_APP_BUILD and
STABILITY_PLATFORM_BUILD.
"""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Dict, Optional

import click
from pydantic import ValidationError

from .classifier import classify_build, resolve_run_flavor
from .config import StabilitySettings, describe_settings_error
from .exceptions import StabilityError
from .flavors import FLAVORS_BY_NAME
from .gate import StabilityRequirement, should_run

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 2
EXIT_SKIP = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stability-flavor",
        description="Classify the build environment into a run flavor.",
    )
    parser.add_argument(
        "--flavor",
        default=None,
        metavar="NAME",
        help="Override the run flavor by name",
    )
    parser.add_argument("--app-build", default=None, help="Application build identifier")
    parser.add_argument("--platform-build", default=None, help="Platform build identifier")
    parser.add_argument(
        "--check",
        default=None,
        metavar="MASK",
        help="Exit 0 if a test requiring MASK would run, 3 if it would be skipped",
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON output")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    return parser


def _pick(value: Optional[str], fallback: Optional[str]) -> Optional[str]:
    return fallback if value is None else value


def _classify(
    override: Optional[str], app_build: Optional[str], platform_build: Optional[str]
) -> Dict[str, Any]:
    if override is not None:
        flavor = resolve_run_flavor(override, app_build, platform_build)
        return {
            "flavor": flavor.name,
            "app_category": None,
            "platform_category": None,
            "override": override,
        }

    classification = classify_build(app_build, platform_build)
    return {
        "flavor": classification.flavor.name,
        "app_category": classification.app_category.value,
        "platform_category": classification.platform_category.value,
        "override": None,
    }


def _fail(message: str) -> int:
    click.echo(f"{click.style('[ERROR]', fg='red')} {message}", err=True)
    return EXIT_ERROR


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    level = getattr(logging, str(args.log_level).upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )
    # basicConfig is a no-op once the root logger has handlers.
    logging.getLogger("stability_gate").setLevel(level)

    try:
        settings = StabilitySettings()
    except ValidationError as exc:
        return _fail(describe_settings_error(exc))
    override = _pick(args.flavor, settings.flavor)
    app_build = _pick(args.app_build, settings.app_build)
    platform_build = _pick(args.platform_build, settings.platform_build)

    try:
        result = _classify(override, app_build, platform_build)
        requirement = StabilityRequirement.of(args.check) if args.check is not None else None
    except StabilityError as exc:
        logger.debug("Classification failed: %s", exc.details)
        return _fail(exc.message)

    if args.json:
        click.echo(json.dumps(result, sort_keys=True))
    elif result["override"] is not None:
        click.echo(f"{click.style(result['flavor'], bold=True)} (override)")
    else:
        click.echo(
            f"{click.style(result['flavor'], bold=True)} "
            f"(app: {result['app_category']}, platform: {result['platform_category']})"
        )

    if requirement is None:
        return EXIT_OK
    flavor = FLAVORS_BY_NAME[result["flavor"]]
    if should_run(requirement, flavor, display_name=f"--check {args.check}"):
        return EXIT_OK
    click.echo(f"{click.style('[SKIP]', fg='yellow')} {requirement} excludes {flavor.name}", err=True)
    return EXIT_SKIP


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
