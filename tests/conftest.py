import pytest
from fastapi.testclient import TestClient

from decentraid.config import Config
from decentraid.main import create_app
from decentraid.services import build_services

TEST_KEY_HEX = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"


@pytest.fixture
def config(tmp_path):
    return Config(
        ENVIRONMENT="development",
        MASTER_KEY=TEST_KEY_HEX,
        DB_PATH=str(tmp_path / "data" / "decentraid.db"),
        FRONTEND_URL="http://frontend.test",
    )


@pytest.fixture
def services(config):
    return build_services(config)


@pytest.fixture
def client(config):
    with TestClient(create_app(config)) as c:
        yield c
