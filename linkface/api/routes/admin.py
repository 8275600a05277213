"""
Routes: painel administrativo.

Login/logout, listagem e busca de submissões, funcionários,
exportação (JSON/CSV) e fotos. Tudo exceto o login exige sessão.
"""

import csv
import io
import logging
import time
import uuid
from datetime import datetime, timezone
from pathlib import PurePath

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse

from linkface.api.deps import Services, get_services, require_admin, session_token_from
from linkface.api.schemas.requests import AuthRequest, EmployeeCreateRequest
from linkface.api.schemas.responses import AuthResponse, EmployeeResponse, StatsResponse
from linkface.config.logging_config import mask_token
from linkface.core.entities.employee import Employee
from linkface.infrastructure.security.session_store import SESSION_COOKIE, verify_admin_credentials

logger = logging.getLogger(__name__)

router = APIRouter()

EXPORT_LIMIT = 10_000
CSV_HEADERS = ["ID", "Nome", "CPF", "Token Funcionário", "Caminho Foto", "Consentimento", "Data"]
PHOTO_MIME_TYPES = {"png": "image/png", "webp": "image/webp"}


# ── Auth ──
@router.post("/auth", response_model=AuthResponse)
async def login(body: AuthRequest, services: Services = Depends(get_services)):
    """Senha ou token estático → cookie de sessão (24h)."""
    if not body.password and not body.token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Senha ou token é obrigatório")

    settings = services.settings
    if not verify_admin_credentials(body.password, body.token, settings.admin_password, settings.admin_token):
        logger.warning(
            "Tentativa de login inválida",
            extra={"context": {"has_password": bool(body.password), "has_token": bool(body.token)}},
        )
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Credenciais inválidas")

    session_token = services.sessions.create()
    logger.info("Login admin realizado com sucesso")

    response = JSONResponse(content=AuthResponse(token=session_token).model_dump())
    response.set_cookie(
        SESSION_COOKIE,
        session_token,
        max_age=int(services.sessions.ttl_seconds),
        path="/",
        httponly=True,
        samesite="strict",
        secure=settings.is_production,
    )
    return response


@router.delete("/auth")
async def logout(request: Request, services: Services = Depends(get_services)):
    services.sessions.revoke(session_token_from(request))
    response = JSONResponse(content={"ok": True})
    response.delete_cookie(SESSION_COOKIE, path="/", httponly=True, samesite="strict")
    return response


# ── Submissions ──
@router.get("/submissions", dependencies=[Depends(require_admin)])
def list_submissions(
    search: str | None = None,
    limit: int = Query(100, ge=1, le=EXPORT_LIMIT),
    offset: int = Query(0, ge=0),
    employee_token: str | None = None,
    services: Services = Depends(get_services),
):
    """Busca por nome/CPF, ou página + estatísticas."""
    if search:
        results = services.submissions.search(search, limit=limit)
        return {"ok": True, "data": [s.to_dict() for s in results], "count": len(results)}

    page = services.submissions.list_all(limit=limit, offset=offset, employee_token=employee_token)
    stats = StatsResponse(**services.submissions.get_stats())
    return {
        "ok": True,
        "data": [s.to_dict() for s in page],
        "count": len(page),
        "stats": stats.model_dump(by_alias=True),
    }


# ── Employees ──
def _employee_response(employee: Employee, base_url: str) -> EmployeeResponse:
    return EmployeeResponse(
        id=employee.id,
        name=employee.name,
        cpf=employee.cpf,
        phone=employee.phone,
        email=employee.email,
        token=employee.token,
        link=f"{base_url.rstrip('/')}/l/{employee.token}",
        created_at=employee.created_at.isoformat() if employee.created_at else None,
    )


@router.get("/employees", dependencies=[Depends(require_admin)])
def list_employees(services: Services = Depends(get_services)):
    base_url = services.settings.public_app_url
    employees = services.employees.list_all()
    return {"ok": True, "data": [_employee_response(e, base_url).model_dump() for e in employees]}


@router.post("/employees", dependencies=[Depends(require_admin)])
def create_employee(body: EmployeeCreateRequest, services: Services = Depends(get_services)):
    """Cria funcionário com token de indicação novo (uuid4)."""
    if not body.name or not body.cpf:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nome e CPF são obrigatórios")

    token = str(uuid.uuid4())
    employee = services.employees.create(
        name=body.name.strip(),
        cpf=body.cpf.strip(),
        token=token,
        phone=body.phone,
        email=body.email,
    )
    logger.info(f"Funcionário criado: {employee.id} token={mask_token(token)}")
    return {"ok": True, "data": _employee_response(employee, services.settings.public_app_url).model_dump()}


# ── Export ──
def _to_csv(rows: list) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for s in rows:
        writer.writerow([
            s.id,
            s.name,
            s.cpf,
            s.employee_token or "",
            s.photo_path,
            "Sim" if s.consent_accepted else "Não",
            s.created_at.isoformat() if s.created_at else "",
        ])
    return buffer.getvalue()


@router.get("/export", dependencies=[Depends(require_admin)])
def export_submissions(
    format: str = Query("json", pattern="^(json|csv)$"),
    employee_token: str | None = None,
    services: Services = Depends(get_services),
):
    rows = services.submissions.list_all(limit=EXPORT_LIMIT, offset=0, employee_token=employee_token)

    if format == "csv":
        file_name = f"submissions-{int(time.time() * 1000)}.csv"
        return Response(
            content=_to_csv(rows),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
        )

    return {
        "ok": True,
        "data": [s.to_dict() for s in rows],
        "count": len(rows),
        "exported_at": datetime.now(timezone.utc).isoformat(),
    }


# ── Photos ──
@router.get("/photos/{submission_id}", dependencies=[Depends(require_admin)])
def get_photo(submission_id: str, services: Services = Depends(get_services)):
    """Redireciona para a URL pública ou serve os bytes (local / Drive)."""
    if not submission_id.isdigit():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="ID inválido")

    submission = services.submissions.get_by_id(int(submission_id))
    if submission is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Submissão não encontrada")

    storage = services.storage
    if storage.supports_public_url:
        url = storage.get_photo_url(submission.drive_file_id, submission.photo_path)
        if url:
            return RedirectResponse(url)

    data = storage.read_photo(submission.drive_file_id, submission.photo_path)
    if data is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Foto não encontrada")

    ext = PurePath(submission.photo_path).suffix.lstrip(".").lower()
    return Response(
        content=data,
        media_type=PHOTO_MIME_TYPES.get(ext, "image/jpeg"),
        headers={"Cache-Control": "private, max-age=3600"},
    )
