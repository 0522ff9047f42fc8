from __future__ import annotations

import pytest
from stability_gate.exceptions import InvalidRequirementError, UnrecognizedOverrideError
from stability_gate.flavors import (
    ALL_FLAVORS,
    FLAVORS_BY_NAME,
    RunFlavor,
    describe_mask,
    lookup_flavor,
    parse_flavor_mask,
)


def test_flavor_bits_are_distinct_single_bits():
    values = [int(flavor) for flavor in FLAVORS_BY_NAME.values()]

    assert values == [0x1, 0x2, 0x4, 0x8, 0x10]
    assert int(ALL_FLAVORS) == 0x1F


def test_lookup_flavor_by_exact_name():
    assert lookup_flavor("UNBUNDLED_POSTSUBMIT") is RunFlavor.UNBUNDLED_POSTSUBMIT


@pytest.mark.parametrize("name", ["local", "LOCAL_RUN", "", "ALL_FLAVORS", "__class__"])
def test_lookup_flavor_rejects_unknown_names(name):
    with pytest.raises(UnrecognizedOverrideError) as exc_info:
        lookup_flavor(name)

    assert exc_info.value.details == {"override": name}
    assert isinstance(exc_info.value, LookupError)


def test_flavors_by_name_is_read_only():
    with pytest.raises(TypeError):
        FLAVORS_BY_NAME["EXTRA"] = RunFlavor.LOCAL  # type: ignore[index]


def test_parse_flavor_mask_accepts_names_and_separators():
    expected = RunFlavor.LOCAL | RunFlavor.PLATFORM_PRESUBMIT

    assert parse_flavor_mask("LOCAL|PLATFORM_PRESUBMIT") == expected
    assert parse_flavor_mask("LOCAL, PLATFORM_PRESUBMIT") == expected
    assert parse_flavor_mask(["LOCAL", RunFlavor.PLATFORM_PRESUBMIT]) == expected
    assert parse_flavor_mask(0x9) == expected
    assert parse_flavor_mask(expected) == expected


def test_parse_flavor_mask_rejects_unknown_bits():
    with pytest.raises(InvalidRequirementError):
        parse_flavor_mask(0x20)


def test_parse_flavor_mask_rejects_unknown_names():
    with pytest.raises(InvalidRequirementError) as exc_info:
        parse_flavor_mask("LOCAL|NIGHTLY")

    assert exc_info.value.details["name"] == "NIGHTLY"


@pytest.mark.parametrize("value", [0, "", [], " | "])
def test_parse_flavor_mask_rejects_empty_requirement(value):
    with pytest.raises(InvalidRequirementError):
        parse_flavor_mask(value)


@pytest.mark.parametrize("value", [True, 1.5, None, [object()]])
def test_parse_flavor_mask_rejects_unsupported_types(value):
    with pytest.raises(InvalidRequirementError):
        parse_flavor_mask(value)


def test_describe_mask_uses_bit_order():
    mask = RunFlavor.PLATFORM_POSTSUBMIT | RunFlavor.LOCAL

    assert describe_mask(mask) == "LOCAL|PLATFORM_POSTSUBMIT"
    assert describe_mask(RunFlavor.UNBUNDLED_PRESUBMIT) == "UNBUNDLED_PRESUBMIT"
    assert describe_mask(0) == "NONE"
