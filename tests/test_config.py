from __future__ import annotations

from pydantic import ValidationError
import pytest
from stability_gate.config import StabilitySettings


def test_settings_default_to_unset(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    settings = StabilitySettings()

    assert settings.flavor is None
    assert settings.app_build is None
    assert settings.platform_build is None
    assert settings.skip_mode == "skip"


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("STABILITY_FLAVOR", "LOCAL")
    monkeypatch.setenv("STABILITY_APP_BUILD", "5-P100")
    monkeypatch.setenv("STABILITY_PLATFORM_BUILD", "9999")
    monkeypatch.setenv("STABILITY_SKIP_MODE", "deselect")

    settings = StabilitySettings()

    assert settings.flavor == "LOCAL"
    assert settings.app_build == "5-P100"
    assert settings.platform_build == "9999"
    assert settings.skip_mode == "deselect"


def test_settings_read_dotenv(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text("STABILITY_APP_BUILD=A\nSTABILITY_PLATFORM_BUILD=P7\n")

    settings = StabilitySettings()

    assert settings.app_build == "A"
    assert settings.platform_build == "P7"


def test_settings_reject_unknown_skip_mode(monkeypatch):
    monkeypatch.setenv("STABILITY_SKIP_MODE", "ignore")

    with pytest.raises(ValidationError):
        StabilitySettings()
