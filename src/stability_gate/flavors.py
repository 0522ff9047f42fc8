"""Run flavors and stability requirement masks."""

from __future__ import annotations

from enum import IntFlag
import re
from types import MappingProxyType
from typing import Iterable, Mapping, Union

from .exceptions import InvalidRequirementError, UnrecognizedOverrideError


class RunFlavor(IntFlag):
    """
    Classification of the environment a test run executes in.

    Exactly one member is active per run. Requirements combine members with
    ``|`` to say "run under any of these".
    """

    LOCAL = 0x1
    UNBUNDLED_PRESUBMIT = 0x2
    UNBUNDLED_POSTSUBMIT = 0x4
    PLATFORM_PRESUBMIT = 0x8
    PLATFORM_POSTSUBMIT = 0x10


SINGLE_FLAVORS: tuple[RunFlavor, ...] = (
    RunFlavor.LOCAL,
    RunFlavor.UNBUNDLED_PRESUBMIT,
    RunFlavor.UNBUNDLED_POSTSUBMIT,
    RunFlavor.PLATFORM_PRESUBMIT,
    RunFlavor.PLATFORM_POSTSUBMIT,
)

ALL_FLAVORS = RunFlavor(sum(SINGLE_FLAVORS))

FLAVORS_BY_NAME: Mapping[str, RunFlavor] = MappingProxyType(
    {
        "LOCAL": RunFlavor.LOCAL,
        "UNBUNDLED_PRESUBMIT": RunFlavor.UNBUNDLED_PRESUBMIT,
        "UNBUNDLED_POSTSUBMIT": RunFlavor.UNBUNDLED_POSTSUBMIT,
        "PLATFORM_PRESUBMIT": RunFlavor.PLATFORM_PRESUBMIT,
        "PLATFORM_POSTSUBMIT": RunFlavor.PLATFORM_POSTSUBMIT,
    }
)

_MASK_SEPARATORS = re.compile(r"[|,]")

MaskSpec = Union[RunFlavor, int, str, Iterable[Union[RunFlavor, int, str]]]


def lookup_flavor(name: str) -> RunFlavor:
    """Resolve an override name to its flavor; names are exact and case-sensitive."""
    try:
        return FLAVORS_BY_NAME[name]
    except KeyError:
        raise UnrecognizedOverrideError(name) from None


def _mask_from_int(value: int) -> RunFlavor:
    if value & ~int(ALL_FLAVORS):
        raise InvalidRequirementError(
            f"Stability mask {value:#x} sets bits outside the known flavors",
            details={"mask": value},
        )
    return RunFlavor(value)


def _mask_from_str(value: str) -> RunFlavor:
    mask = RunFlavor(0)
    for part in _MASK_SEPARATORS.split(value):
        name = part.strip()
        if not name:
            continue
        flavor = FLAVORS_BY_NAME.get(name)
        if flavor is None:
            raise InvalidRequirementError(
                f"Unknown run flavor {name!r} in stability requirement {value!r}",
                details={"requirement": value, "name": name},
            )
        mask |= flavor
    return mask


def parse_flavor_mask(value: MaskSpec) -> RunFlavor:
    """
    Normalize a declared stability requirement to a ``RunFlavor`` mask.

    Accepts a ``RunFlavor``, a plain integer bitmask, a flavor name, a
    ``|``/``,`` separated list of names, or an iterable mixing any of these.
    """
    if isinstance(value, bool):
        raise InvalidRequirementError(
            f"Stability requirement must be a flavor mask, got {value!r}",
            details={"requirement": value},
        )
    if isinstance(value, RunFlavor):
        mask = value
    elif isinstance(value, int):
        mask = _mask_from_int(value)
    elif isinstance(value, str):
        mask = _mask_from_str(value)
    elif isinstance(value, Iterable):
        mask = RunFlavor(0)
        for part in value:
            if not isinstance(part, (RunFlavor, int, str)) or isinstance(part, bool):
                raise InvalidRequirementError(
                    f"Unsupported stability requirement entry {part!r}",
                    details={"entry": repr(part)},
                )
            mask |= parse_flavor_mask(part)
    else:
        raise InvalidRequirementError(
            f"Unsupported stability requirement {value!r}",
            details={"requirement": repr(value)},
        )

    if not mask:
        raise InvalidRequirementError(
            "Stability requirement names no run flavor; the test could never run",
            details={"requirement": repr(value)},
        )
    return mask


def describe_mask(mask: int) -> str:
    """Render a mask as ``LOCAL|PLATFORM_PRESUBMIT`` in bit order."""
    names = [str(flavor.name) for flavor in SINGLE_FLAVORS if mask & flavor]
    return "|".join(names) if names else "NONE"
