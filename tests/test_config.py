import pytest

from smartvision.core.config import Settings


ENV_VARS = (
    "COMPUTER_VISION_ENDPOINT",
    "COMPUTER_VISION_KEY",
    "BLOB_CONNECTION_STRING",
    "BLOB_CONTAINER_NAME",
    "HOST",
    "PORT",
    "LOG_LEVEL",
    "OCR_LANGUAGE",
    "OCR_MAX_ATTEMPTS",
    "OCR_POLL_INTERVAL",
    "VISION_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.setattr("smartvision.core.config.load_dotenv", lambda **_: None)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_settings_defaults():
    settings = Settings.from_env()

    assert settings.port == 3000
    assert settings.host == "0.0.0.0"
    assert settings.ocr_max_attempts == 10
    assert settings.ocr_poll_interval == 1.0
    assert settings.ocr_language == "en"
    assert settings.vision_endpoint is None
    assert settings.blob_connection_string is None


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("COMPUTER_VISION_ENDPOINT", "https://vision.example.com/")
    monkeypatch.setenv("COMPUTER_VISION_KEY", "key")
    monkeypatch.setenv("BLOB_CONNECTION_STRING", "DefaultEndpointsProtocol=https;AccountName=a")
    monkeypatch.setenv("BLOB_CONTAINER_NAME", "images")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("OCR_MAX_ATTEMPTS", "5")
    monkeypatch.setenv("OCR_POLL_INTERVAL", "0.25")

    settings = Settings.from_env()

    assert settings.vision_endpoint == "https://vision.example.com/"
    assert settings.vision_key == "key"
    assert settings.blob_container_name == "images"
    assert settings.port == 8080
    assert settings.ocr_max_attempts == 5
    assert settings.ocr_poll_interval == 0.25


def test_settings_blank_values_become_none(monkeypatch):
    monkeypatch.setenv("COMPUTER_VISION_KEY", "")
    monkeypatch.setenv("PORT", " ")

    settings = Settings.from_env()

    assert settings.vision_key is None
    assert settings.port == 3000


def test_settings_invalid_port_fails(monkeypatch):
    monkeypatch.setenv("PORT", "eighty")

    with pytest.raises(ValueError, match="PORT"):
        Settings.from_env()


def test_settings_zero_attempts_fails(monkeypatch):
    monkeypatch.setenv("OCR_MAX_ATTEMPTS", "0")

    with pytest.raises(ValueError, match="OCR_MAX_ATTEMPTS"):
        Settings.from_env()


def test_settings_immutable():
    settings = Settings()

    with pytest.raises(Exception):
        settings.port = 1
