import pytest

from footprint import config
from footprint.config import MM_PER_PIXEL, Settings, get_api_key


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for name in ("ANTHROPIC_API_KEY", "FOOTPRINT_MM_PER_PIXEL", "FOOTPRINT_EDGE_THRESHOLD",
                 "FOOTPRINT_VISION_TIMEOUT", "FOOTPRINT_VISION_MODEL", "FOOTPRINT_VISION_ENDPOINT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "API_KEY_FILE", tmp_path / ".ANTHROPIC_API_KEY")


def test_defaults():
    settings = Settings.from_env()
    assert settings.mm_per_pixel == MM_PER_PIXEL
    assert settings.edge_threshold == 40
    assert settings.api_key is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("FOOTPRINT_MM_PER_PIXEL", "0.264")
    monkeypatch.setenv("FOOTPRINT_EDGE_THRESHOLD", "25")
    monkeypatch.setenv("FOOTPRINT_VISION_MODEL", "other-model")
    monkeypatch.setenv("ANTHROPIC_API_KEY", " secret ")
    settings = Settings.from_env()
    assert settings.mm_per_pixel == 0.264
    assert settings.edge_threshold == 25
    assert settings.vision_model == "other-model"
    assert settings.api_key == "secret"


@pytest.mark.parametrize("name,value", [
    ("FOOTPRINT_MM_PER_PIXEL", "wide"),
    ("FOOTPRINT_MM_PER_PIXEL", "-1"),
    ("FOOTPRINT_VISION_TIMEOUT", "0"),
])
def test_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        Settings.from_env()


def test_api_key_file_fallback(tmp_path):
    (tmp_path / ".ANTHROPIC_API_KEY").write_text("from-file\n")
    assert get_api_key() == "from-file"
