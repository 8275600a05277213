import pytest
from fastapi.testclient import TestClient

from linkface.api.deps import build_services
from linkface.api.main import create_app
from linkface.config.settings import Settings
from linkface.infrastructure.db.database import init_db
from tests.helpers import ADMIN_PASSWORD


@pytest.fixture
def settings(tmp_path):
    """Settings isoladas: banco e uploads dentro de tmp_path, sem .env."""
    return Settings(
        _env_file=None,
        env="test",
        data_dir=str(tmp_path / "data"),
        storage_type="local",
        image_codec="opencv",
        admin_password=ADMIN_PASSWORD,
        rate_limit_max_requests=50,
    )


@pytest.fixture
def services(settings):
    svc = build_services(settings)
    init_db(svc.engine)
    yield svc
    svc.engine.dispose()


@pytest.fixture
def client(services):
    with TestClient(create_app(services=services)) as c:
        yield c


@pytest.fixture
def admin_client(client):
    """Client já autenticado (cookie de sessão)."""
    response = client.post("/api/admin/auth", json={"password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return client
