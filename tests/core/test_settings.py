import pytest
from pydantic import ValidationError

from fortnite_coach.core.settings import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("FORTNITE_API_KEY", "FORTNITE_API_BASE_URL", "OPENAI_API_KEY", "OPENAI_MODEL"):
        monkeypatch.delenv(name, raising=False)


def test_missing_api_keys_are_fatal():
    with pytest.raises(ValidationError, match="FORTNITE_API_KEY and OPENAI_API_KEY"):
        Settings(_env_file=None)


def test_missing_openai_key_is_fatal(monkeypatch):
    monkeypatch.setenv("FORTNITE_API_KEY", "fn-key")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_settings_load_from_environment(monkeypatch):
    monkeypatch.setenv("FORTNITE_API_KEY", "  fn-key ")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("FORTNITE_API_BASE_URL", "https://fortnite-api.com")

    settings = Settings(_env_file=None)

    assert settings.fortnite_api_key == "fn-key"
    assert settings.openai_api_key == "sk-test"
    assert settings.fortnite_api_base_url == "https://fortnite-api.com/"
    assert settings.openai_model == "gpt-3.5-turbo"
