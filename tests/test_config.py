import pytest

from decentraid.config import Config
from decentraid.errors import ConfigurationError
from decentraid.services import build_services


def _config(tmp_path, **overrides):
    settings = dict(ENVIRONMENT="development", MASTER_KEY="ab" * 32, DB_PATH=str(tmp_path / "db.sqlite"))
    settings.update(overrides)
    return Config(**settings)


def test_valid_key(tmp_path):
    config = _config(tmp_path)
    assert config.is_encryption_configured()
    assert config.get_master_key() == bytes.fromhex("ab" * 32)


@pytest.mark.parametrize("env", ["production", "PROD", "staging"])
def test_missing_key_fails_in_production(tmp_path, env):
    config = _config(tmp_path, ENVIRONMENT=env, MASTER_KEY="")
    with pytest.raises(ConfigurationError):
        build_services(config)


def test_missing_key_uses_ephemeral_key_in_development(tmp_path):
    config = _config(tmp_path, MASTER_KEY="")
    services = build_services(config)
    assert len(config.get_master_key()) == 32
    sealed = services.vault.create_encrypted("did:dev", {"name": "Dev"})
    assert services.encryption.decrypt_json(sealed.encrypted_payload) == {"name": "Dev"}


@pytest.mark.parametrize("key", ["zz" * 32, "ab" * 16, "ab" * 33, "0123456789abcdef"])
def test_malformed_key_always_fails(tmp_path, key):
    for env in ("development", "production"):
        with pytest.raises(ConfigurationError):
            build_services(_config(tmp_path, ENVIRONMENT=env, MASTER_KEY=key))


def test_invalid_request_id_range(tmp_path):
    with pytest.raises(ConfigurationError):
        _config(tmp_path, REQUEST_ID_MIN=10, REQUEST_ID_MAX=10).validate()


def test_invalid_attempts(tmp_path):
    with pytest.raises(ConfigurationError):
        _config(tmp_path, ID_GENERATION_ATTEMPTS=0).validate()


def test_share_link(tmp_path):
    config = _config(tmp_path, FRONTEND_URL="https://app.example/")
    assert config.get_share_link("abc") == "https://app.example/import/abc"


def test_data_dir_created(tmp_path):
    config = _config(tmp_path, DB_PATH=str(tmp_path / "nested" / "dir" / "db.sqlite"))
    build_services(config)
    assert (tmp_path / "nested" / "dir" / "db.sqlite").exists()


def test_request_id_range_defaults():
    assert Config.REQUEST_ID_MIN == 100000
    assert Config.REQUEST_ID_MAX == 999999


def test_request_id_range_reaches_broker(tmp_path):
    services = build_services(_config(tmp_path, REQUEST_ID_MIN=200000, REQUEST_ID_MAX=200001))
    assert services.consent.request_verification("did:verifier", "did:holder", "age") == 200000
