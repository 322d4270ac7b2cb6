import pytest

from rewind_engine.runtime import EngineSettings, telemetry


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("REWIND_ENGINE_ROOT_BRANCH", raising=False)
    monkeypatch.delenv("REWIND_ENGINE_BRANCH_PREFIX", raising=False)

    settings = EngineSettings.from_env()

    assert settings.root_branch_id == "main"
    assert settings.branch_prefix == "branch-"


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REWIND_ENGINE_ROOT_BRANCH", "trunk")
    monkeypatch.setenv("REWIND_ENGINE_BRANCH_PREFIX", "fork-")

    settings = EngineSettings.from_env()

    assert settings.root_branch_id == "trunk"
    assert settings.branch_prefix == "fork-"


def test_settings_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REWIND_ENGINE_ROOT_BRANCH", "trunk")

    settings = EngineSettings.from_env(root_branch_id="main")

    assert settings.root_branch_id == "main"


def test_settings_reject_empty_values() -> None:
    with pytest.raises(ValueError):
        EngineSettings(root_branch_id="")
    with pytest.raises(ValueError):
        EngineSettings(branch_prefix="")


def test_configure_rejects_unknown_preset() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(preset="verbose")


def test_configure_rejects_config_and_preset() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(config=object(), preset="development")


def test_span_reraises_block_errors() -> None:
    with pytest.raises(KeyError):
        with telemetry.span("test::span", component=True, metadata={"case": "error"}):
            raise KeyError("boom")
