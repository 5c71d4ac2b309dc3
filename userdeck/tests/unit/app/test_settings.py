import pytest

from userdeck.app.settings import ClientSettings
from userdeck.adapters.storage_local import StorageLocal


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("USERDECK_LOG_LEVEL", "USERDECK_DEBUG", "USERDECK_DEBUG_LOGGING"):
        monkeypatch.delenv(name, raising=False)


def test_defaults_match_service_defaults(tmp_path):
    settings = ClientSettings(storage_dir=str(tmp_path))

    assert settings.base_url == "https://randomuser.me/api/"
    assert settings.page_size == 25
    assert (settings.request_timeout_s, settings.resource_timeout_s) == (30.0, 60.0)
    assert settings.image_count_limit == 100
    assert settings.image_cost_limit_bytes == 100 * 1024 * 1024
    assert settings.debug_logging is False


def test_storage_dir_defaults_to_home():
    assert ClientSettings().storage_dir.endswith(".userdeck")


def test_apply_dict_coerces_and_ignores_unknown_keys(tmp_path):
    settings = ClientSettings(storage_dir=str(tmp_path)).apply_dict(
        {"page_size": "50", "retry_delay_s": 2, "persist_seed": "no", "colour": "blue"}
    )

    assert settings.page_size == 50
    assert settings.retry_delay_s == 2.0
    assert settings.persist_seed is False


@pytest.mark.parametrize(
    "payload",
    [
        {"page_size": 0},
        {"page_size": "many"},
        {"retries": -1},
        {"base_url": "ftp://example.test"},
        {"persist_seed": "maybe"},
        {"request_timeout_s": True},
    ],
)
def test_apply_dict_rejects_bad_values(tmp_path, payload):
    with pytest.raises(ValueError):
        ClientSettings(storage_dir=str(tmp_path)).apply_dict(payload)


def test_env_overrides_persisted_values(tmp_path):
    storage = StorageLocal(root_dir=str(tmp_path))
    storage.save_user_settings({"page_size": 40, "retries": 5})

    settings = ClientSettings.load(storage, environ={"USERDECK_PAGE_SIZE": "10"})

    assert settings.page_size == 10
    assert settings.retries == 5


def test_to_dict_round_trips_through_apply_dict(tmp_path):
    original = ClientSettings(storage_dir=str(tmp_path), page_size=7)
    again = ClientSettings().apply_dict(original.to_dict())
    assert again == original


def test_debug_env_flag_enables_debug_logging(monkeypatch):
    monkeypatch.setenv("USERDECK_DEBUG", "1")
    assert ClientSettings().debug_logging is True
