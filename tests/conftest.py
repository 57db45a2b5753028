import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from main import create_app
from tests.fakes import FakeOpenAI


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def fake_openai(upload_dir):
    return FakeOpenAI(upload_dir)


@pytest.fixture
def make_settings(tmp_path, upload_dir):
    def _make(**overrides):
        values = dict(
            openai_api_key="sk-test-abcd1234",
            admin_token="secret",
            vector_store_id=None,
            config_path=str(tmp_path / "config.json"),
            upload_dir=str(upload_dir),
            max_file_size_mb=1,
        )
        values.update(overrides)
        return Settings(_env_file=None, **values)
    return _make


@pytest.fixture
def make_client(make_settings, fake_openai):
    def _make(**overrides):
        app = create_app(make_settings(**overrides), client=fake_openai)
        return TestClient(app)
    return _make


@pytest.fixture
def client(make_client):
    return make_client()
