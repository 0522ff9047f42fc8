"""Per-test run/skip decisions against the current run flavor."""

from __future__ import annotations

import logging
from typing import Annotated, Callable, Iterable, List, Optional, Tuple, TypeVar, Union

from pydantic import BaseModel, ConfigDict, PlainValidator

from .flavors import MaskSpec, RunFlavor, describe_mask, parse_flavor_mask

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StabilityRequirement(BaseModel):
    """The run flavors a test is eligible to execute under."""

    model_config = ConfigDict(frozen=True)

    flavors: Annotated[RunFlavor, PlainValidator(parse_flavor_mask)]

    @classmethod
    def of(cls, value: MaskSpec) -> "StabilityRequirement":
        return cls(flavors=value)

    def __str__(self) -> str:
        return describe_mask(self.flavors)


RequirementLike = Union[StabilityRequirement, RunFlavor, int]


def _mask_of(requirement: RequirementLike) -> int:
    if isinstance(requirement, StabilityRequirement):
        return int(requirement.flavors)
    return int(requirement)


def should_run(
    requirement: Optional[RequirementLike],
    current_flavor: RunFlavor,
    display_name: Optional[str] = None,
) -> bool:
    """
    Return True when a test with ``requirement`` may run under ``current_flavor``.

    A test without a requirement is always eligible.
    """
    if requirement is None:
        return True

    run = (_mask_of(requirement) & int(current_flavor)) != 0
    logger.debug("%s %s", "Running" if run else "Skipping", display_name or "<unnamed test>")
    return run


def select(
    items: Iterable[T],
    current_flavor: RunFlavor,
    requirement_of: Callable[[T], Optional[RequirementLike]],
    name_of: Callable[[T], str] = str,
) -> Tuple[List[T], List[T]]:
    """Split ``items`` into ``(selected, deselected)`` before execution."""
    selected: List[T] = []
    deselected: List[T] = []
    for item in items:
        if should_run(requirement_of(item), current_flavor, display_name=name_of(item)):
            selected.append(item)
        else:
            deselected.append(item)
    return selected, deselected
