import asyncio
import csv
import io
import time

import httpx
import pytest

from linkface.api.deps import build_services
from linkface.api.main import create_app
from linkface.infrastructure.db.database import init_db
from linkface.infrastructure.storage.local_storage import LocalStorageService
from linkface.infrastructure.storage.s3_storage import S3StorageService
from tests.helpers import ADMIN_PASSWORD, VALID_CPF, data_url, make_image


def _submission(**overrides):
    body = {
        "name": "Maria Souza",
        "cpf": VALID_CPF,
        "photoDataUrl": data_url(make_image()),
        "consentAccepted": True,
    }
    body.update(overrides)
    return body


# ── Health ──

def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert body["storage"] == "local"


# ── Public submission ──

def test_submission_success_returns_id_and_rate_headers(client, services):
    response = client.post("/api/submissions", json=_submission())

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert isinstance(body["submissionId"], int)
    assert response.headers["X-RateLimit-Limit"] == "50"
    assert response.headers["X-RateLimit-Remaining"] == "49"
    assert services.submissions.get_by_id(body["submissionId"]) is not None


def test_submission_errors_use_ok_false_body(client):
    response = client.post("/api/submissions", json=_submission(cpf="123.456.789-00"))
    assert response.status_code == 422
    assert response.json() == {"ok": False, "error": "CPF inválido."}
    assert "X-RateLimit-Remaining" in response.headers

    response = client.post("/api/submissions", json=_submission(consentAccepted=False))
    assert response.status_code == 400

    response = client.post("/api/submissions", json=_submission(token="nope"))
    assert response.status_code == 404
    assert response.json()["error"] == "Token não encontrado."

    response = client.post("/api/submissions", json={"name": "Só nome"})
    assert response.status_code == 400


def test_submission_rate_limited(client, services):
    services.rate_limiter.max_requests = 1
    client.post("/api/submissions", json=_submission())

    response = client.post("/api/submissions", json=_submission())

    assert response.status_code == 429
    body = response.json()
    assert body["ok"] is False
    assert body["retryAfter"] > 0
    assert response.headers["Retry-After"] == str(body["retryAfter"])
    assert response.headers["X-RateLimit-Remaining"] == "0"


def test_malformed_json_is_400(client):
    response = client.post(
        "/api/submissions", content="{not json", headers={"content-type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json()["ok"] is False


# ── Admin auth ──

def test_admin_endpoints_require_session(client):
    for path in ("/api/admin/submissions", "/api/admin/employees", "/api/admin/export", "/api/admin/photos/1"):
        response = client.get(path)
        assert response.status_code == 401, path
        assert response.json() == {"ok": False, "error": "Não autenticado"}

    response = client.get("/api/admin/submissions", headers={"x-session-token": "forged"})
    assert response.status_code == 401
    assert response.json()["error"] == "Sessão inválida ou expirada"


def test_login_rejects_bad_or_missing_credentials(client):
    assert client.post("/api/admin/auth", json={}).status_code == 400
    response = client.post("/api/admin/auth", json={"password": "wrong"})
    assert response.status_code == 401
    assert response.json() == {"ok": False, "error": "Credenciais inválidas"}


def test_login_sets_cookie_and_logout_revokes(client, services):
    response = client.post("/api/admin/auth", json={"password": ADMIN_PASSWORD})
    assert response.status_code == 200
    token = response.json()["token"]
    set_cookie = response.headers["set-cookie"].lower()
    assert "admin_session=" in set_cookie
    assert "httponly" in set_cookie
    assert "samesite=strict" in set_cookie

    assert client.get("/api/admin/submissions").status_code == 200
    assert client.get("/api/admin/submissions", headers={"authorization": f"Bearer {token}"}).status_code == 200

    assert client.delete("/api/admin/auth").status_code == 200
    assert services.sessions.is_valid(token) is False


# ── Admin data ──

def test_employee_creation_returns_referral_link(admin_client):
    response = admin_client.post("/api/admin/employees", json={"name": "Func", "cpf": "1", "email": "f@x.com"})
    assert response.status_code == 200
    employee = response.json()["data"]
    assert employee["link"] == f"http://localhost:8000/l/{employee['token']}"

    listed = admin_client.get("/api/admin/employees").json()["data"]
    assert [e["token"] for e in listed] == [employee["token"]]

    assert admin_client.post("/api/admin/employees", json={"name": "Sem CPF"}).status_code == 400


def test_list_search_and_stats(admin_client, services):
    services.submissions.insert(name="Maria", cpf="111", photo_path="a", employee_token="t1")
    services.submissions.insert(name="João", cpf="222", photo_path="b")

    body = admin_client.get("/api/admin/submissions").json()
    assert body["count"] == 2
    assert body["stats"]["total"] == 2
    assert body["stats"]["today"] == 2
    assert body["stats"]["byEmployee"] == [{"employee_token": "t1", "count": 1}]

    found = admin_client.get("/api/admin/submissions", params={"search": "Maria"}).json()
    assert [s["name"] for s in found["data"]] == ["Maria"]


def test_export_csv(admin_client, services):
    services.submissions.insert(name='Ana "A"', cpf="111", photo_path="/p/a.jpg", consent_accepted=True)

    response = admin_client.get("/api/admin/export", params={"format": "csv"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="submissions-' in response.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == ["ID", "Nome", "CPF", "Token Funcionário", "Caminho Foto", "Consentimento", "Data"]
    assert rows[1][1:6] == ['Ana "A"', "111", "", "/p/a.jpg", "Sim"]
    assert response.text.splitlines()[0].startswith('"ID","Nome"')


def test_export_json(admin_client, services):
    services.submissions.insert(name="Ana", cpf="111", photo_path="a")
    body = admin_client.get("/api/admin/export").json()
    assert body["ok"] is True
    assert body["count"] == 1
    assert "exported_at" in body


# ── Photos ──

def test_photo_served_from_local_storage(admin_client):
    image = make_image()
    submission_id = admin_client.post("/api/submissions", json=_submission(photoDataUrl=data_url(image))).json()[
        "submissionId"
    ]

    response = admin_client.get(f"/api/admin/photos/{submission_id}")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content[:8] == b"\x89PNG\r\n\x1a\n"


def test_photo_bad_id_and_missing(admin_client, services):
    assert admin_client.get("/api/admin/photos/abc").status_code == 400
    assert admin_client.get("/api/admin/photos/999").status_code == 404

    submission_id = services.submissions.insert(name="X", cpf="1", photo_path="/nao/existe.jpg")
    assert admin_client.get(f"/api/admin/photos/{submission_id}").status_code == 404


def test_photo_redirects_for_public_url_backend(admin_client, services):
    services.storage = S3StorageService(bucket="fotos", region="us-east-1", client=object())
    submission_id = services.submissions.insert(
        name="X", cpf="1", photo_path="https://fotos.s3.us-east-1.amazonaws.com/photos/a.jpg",
        drive_file_id="photos/a.jpg",
    )

    response = admin_client.get(f"/api/admin/photos/{submission_id}", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == "https://fotos.s3.us-east-1.amazonaws.com/photos/a.jpg"


# ── Consent, quota and concurrency ──

@pytest.mark.parametrize("consent", ["yes", "true", 1, None])
def test_consent_must_be_json_true(client, services, consent):
    response = client.post("/api/submissions", json=_submission(consentAccepted=consent))

    assert response.status_code == 400
    assert response.json()["ok"] is False
    assert services.submissions.get_stats()["total"] == 0
    assert list(services.settings.uploads_dir.glob("*")) == []


def test_invalid_body_still_counts_against_rate_limit(client, services):
    services.rate_limiter.max_requests = 1

    invalid = client.post("/api/submissions", json=_submission(name=123))
    assert invalid.status_code == 400
    assert invalid.headers["X-RateLimit-Remaining"] == "0"

    response = client.post("/api/submissions", json=_submission())
    assert response.status_code == 429


def test_referral_submission_notifies_employee(client, services, monkeypatch):
    calls = []
    monkeypatch.setattr(services.notifier, "notify_new_submission", lambda **kwargs: calls.append(kwargs))
    services.employees.create(name="Func", cpf="1", token="tok-notify", email="func@example.com")

    response = client.post("/api/submissions", json=_submission(token="tok-notify"))

    assert response.status_code == 200
    assert calls == [
        {
            "client_name": "Maria Souza",
            "client_cpf": VALID_CPF,
            "employee_email": "func@example.com",
            "employee_phone": None,
        }
    ]


class SlowStorage(LocalStorageService):
    def __init__(self, uploads_dir, delay: float):
        super().__init__(uploads_dir)
        self.delay = delay

    def upload(self, data, file_name, mime_type):
        time.sleep(self.delay)
        return super().upload(data, file_name, mime_type)


def test_slow_upload_does_not_block_other_requests(settings, tmp_path):
    services = build_services(settings, storage=SlowStorage(tmp_path / "slow", delay=1.0))
    init_db(services.engine)
    app = create_app(services=services)

    async def scenario():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            submission = asyncio.create_task(client.post("/api/submissions", json=_submission()))
            await asyncio.sleep(0.1)
            started = time.perf_counter()
            health = await client.get("/api/health")
            elapsed = time.perf_counter() - started
            return health, elapsed, await submission

    health, elapsed, submission = asyncio.run(scenario())

    assert health.status_code == 200
    assert elapsed < 0.5
    assert submission.status_code == 200
    services.engine.dispose()
