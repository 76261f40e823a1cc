import os

import pytest

from mallnav import main as entry


def test_read_env_file_parses_quotes_comments_and_export(tmp_path) -> None:
    env_file = tmp_path / "settings.env"
    env_file.write_text(
        "# venue settings\n"
        "\n"
        "export MALLNAV_GENERATED_FLOORS=3\n"
        "MALLNAV_CORS_ORIGINS='http://a.test, http://b.test'\n"
        'API_HOST="0.0.0.0"\n'
        "NOT_A_SETTING\n",
        encoding="utf-8",
    )

    assert entry.read_env_file(env_file) == {
        "MALLNAV_GENERATED_FLOORS": "3",
        "MALLNAV_CORS_ORIGINS": "http://a.test, http://b.test",
        "API_HOST": "0.0.0.0",
    }


def test_apply_env_file_keeps_existing_environment(tmp_path, monkeypatch) -> None:
    env_file = tmp_path / "local.env"
    env_file.write_text("API_PORT=9000\nMALLNAV_TEST_ONLY_KEY=from-file\n", encoding="utf-8")
    monkeypatch.setenv("API_PORT", "8123")
    monkeypatch.delenv("MALLNAV_TEST_ONLY_KEY", raising=False)
    monkeypatch.setenv("MALLNAV_ENV_FILE", str(env_file))

    applied = entry.apply_env_file()
    try:
        assert applied == ["MALLNAV_TEST_ONLY_KEY"]
        assert os.environ["API_PORT"] == "8123"
        assert os.environ["MALLNAV_TEST_ONLY_KEY"] == "from-file"
    finally:
        os.environ.pop("MALLNAV_TEST_ONLY_KEY", None)


def test_apply_env_file_missing_file_is_noop(tmp_path) -> None:
    assert entry.apply_env_file(tmp_path / "absent.env") == []


def test_configure_logging_rejects_unknown_level(monkeypatch) -> None:
    monkeypatch.setenv("MALLNAV_LOG_LEVEL", "chatty")
    with pytest.raises(ValueError, match="not a logging level"):
        entry.configure_logging()


def test_main_passes_environment_to_uvicorn(monkeypatch) -> None:
    calls = {}
    monkeypatch.setattr(entry.uvicorn, "run", lambda target, **kwargs: calls.update(target=target, **kwargs))
    monkeypatch.setenv("API_HOST", "0.0.0.0")
    monkeypatch.setenv("API_PORT", "8081")
    monkeypatch.setenv("API_RELOAD", "yes")

    entry.main()

    assert calls == {"target": "mallnav.main:app", "host": "0.0.0.0", "port": 8081, "reload": True}


def test_module_exposes_configured_app() -> None:
    assert entry.app.title == "mallnav API"
