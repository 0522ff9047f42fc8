from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import threading

import pytest
from stability_gate.config import StabilitySettings
from stability_gate.context import RunFlavorContext
from stability_gate.exceptions import MalformedAppBuildError, UnrecognizedOverrideError
from stability_gate.flavors import RunFlavor


def test_context_resolves_lazily_and_caches():
    calls: list[str] = []

    def app_build() -> str:
        calls.append("app")
        return "5-P100"

    context = RunFlavorContext(app_build=app_build, platform_build="9999")

    assert context.is_resolved is False
    assert calls == []
    assert context.flavor is RunFlavor.UNBUNDLED_PRESUBMIT
    assert context.flavor is RunFlavor.UNBUNDLED_PRESUBMIT
    assert context.is_resolved is True
    assert calls == ["app"]


def test_override_never_reads_build_sources():
    def explode() -> str:
        raise AssertionError("build source should not be read")

    context = RunFlavorContext(
        override="PLATFORM_POSTSUBMIT", app_build=explode, platform_build=explode
    )

    assert context.flavor is RunFlavor.PLATFORM_POSTSUBMIT


def test_failed_resolution_is_not_cached():
    builds = iter(["garbage!!", "5-100"])
    context = RunFlavorContext(app_build=lambda: next(builds), platform_build="9999")

    with pytest.raises(MalformedAppBuildError):
        context.flavor
    assert context.is_resolved is False
    assert context.flavor is RunFlavor.UNBUNDLED_POSTSUBMIT


def test_bad_override_raises_on_every_access():
    context = RunFlavorContext(override="NIGHTLY")

    for _ in range(2):
        with pytest.raises(UnrecognizedOverrideError):
            context.flavor


def test_concurrent_first_access_resolves_once():
    calls: list[int] = []
    barrier = threading.Barrier(8)

    def app_build() -> str:
        calls.append(1)
        return "A"

    context = RunFlavorContext(app_build=app_build, platform_build="P7")

    def read() -> RunFlavor:
        barrier.wait()
        return context.flavor

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: read(), range(8)))

    assert set(results) == {RunFlavor.PLATFORM_PRESUBMIT}
    assert len(calls) == 1


def test_should_run_only_resolves_for_marked_tests():
    context = RunFlavorContext(app_build="garbage!!", platform_build="9999")

    assert context.should_run(None, display_name="test_plain") is True
    assert context.is_resolved is False
    with pytest.raises(MalformedAppBuildError):
        context.should_run(RunFlavor.LOCAL)


def test_should_run_uses_cached_flavor():
    context = RunFlavorContext(override="LOCAL")

    assert context.should_run(RunFlavor.LOCAL | RunFlavor.PLATFORM_PRESUBMIT) is True
    assert context.should_run(RunFlavor.UNBUNDLED_POSTSUBMIT) is False


def test_from_settings(monkeypatch):
    monkeypatch.setenv("STABILITY_APP_BUILD", "BuildFromAndroidStudio")
    monkeypatch.setenv("STABILITY_PLATFORM_BUILD", "eng.alice.1.2")

    context = RunFlavorContext.from_settings(StabilitySettings())

    assert context.override is None
    assert context.flavor is RunFlavor.LOCAL
