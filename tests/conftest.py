from __future__ import annotations

import pytest

pytest_plugins = ["pytester"]


@pytest.fixture(autouse=True)
def _clear_stability_env(monkeypatch):
    for name in (
        "STABILITY_FLAVOR",
        "STABILITY_APP_BUILD",
        "STABILITY_PLATFORM_BUILD",
        "STABILITY_SKIP_MODE",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
