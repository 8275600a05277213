"""
Service container + FastAPI dependencies.

Todo estado mutável (rate limiter, sessões) vive em objetos explícitos
criados por `build_services` e pendurados em `app.state.services`.
Testes criam uma instância nova por teste.
"""

from dataclasses import dataclass

from fastapi import HTTPException, Request, status
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from linkface.config.settings import Settings, get_settings
from linkface.core.interfaces.image_codec import IImageCodec
from linkface.core.interfaces.storage_service import IStorageService
from linkface.core.use_cases.submit_photo import SubmitPhotoUseCase
from linkface.infrastructure.db.database import create_db_engine, create_session_factory
from linkface.infrastructure.db.repository import EmployeeRepository, SubmissionRepository
from linkface.infrastructure.imaging.image_compressor import ImageCompressor
from linkface.infrastructure.imaging.image_validator import ImageValidator
from linkface.infrastructure.imaging.null_codec import NullImageCodec
from linkface.infrastructure.imaging.opencv_codec import OpenCVImageCodec
from linkface.infrastructure.notifications.notifier import NotificationService
from linkface.infrastructure.ratelimit.fixed_window import FixedWindowRateLimiter
from linkface.infrastructure.security.session_store import (
    SESSION_COOKIE,
    SESSION_HEADER,
    AdminSessionStore,
)
from linkface.infrastructure.storage import create_storage_service


@dataclass
class Services:
    settings: Settings
    engine: Engine
    session_factory: sessionmaker
    employees: EmployeeRepository
    submissions: SubmissionRepository
    storage: IStorageService
    rate_limiter: FixedWindowRateLimiter
    sessions: AdminSessionStore
    notifier: NotificationService
    submit_photo: SubmitPhotoUseCase


def create_image_codec(name: str) -> IImageCodec:
    """Codec pelo nome: "opencv" (OpenCV) ou "none" (sem codec)."""
    if name.lower() == "opencv":
        return OpenCVImageCodec()
    if name.lower() == "none":
        return NullImageCodec()
    raise ValueError(f"IMAGE_CODEC inválido: {name}. Use: opencv, none")


def build_services(settings: Settings = None, storage: IStorageService = None) -> Services:
    """Factory — monta o grafo de dependências a partir das settings."""
    settings = settings or get_settings()

    engine = create_db_engine(settings.resolved_database_url)
    session_factory = create_session_factory(engine)
    employees = EmployeeRepository(session_factory)
    submissions = SubmissionRepository(session_factory)
    storage = storage or create_storage_service(settings)

    codec = create_image_codec(settings.image_codec)
    rate_limiter = FixedWindowRateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    notifier = NotificationService(settings.email_service, settings.sms_service)

    submit_photo = SubmitPhotoUseCase(
        rate_limiter=rate_limiter,
        employees=employees,
        submissions=submissions,
        image_validator=ImageValidator(
            codec=codec,
            max_image_size=settings.max_image_size,
            max_base64_size=settings.max_base64_size,
            min_dimension=settings.min_image_dimension,
            allowed_mime_types=settings.allowed_image_types_list,
        ),
        compressor=ImageCompressor(
            codec=codec,
            max_width=settings.max_image_width,
            max_height=settings.max_image_height,
            quality=settings.image_quality,
        ),
        storage=storage,
        notifier=notifier,
    )

    return Services(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        employees=employees,
        submissions=submissions,
        storage=storage,
        rate_limiter=rate_limiter,
        sessions=AdminSessionStore(ttl_seconds=settings.admin_session_ttl_seconds),
        notifier=notifier,
        submit_photo=submit_photo,
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def session_token_from(request: Request) -> str | None:
    """Header X-Session-Token, Authorization: Bearer ou cookie admin_session."""
    header_token = request.headers.get(SESSION_HEADER)
    if header_token:
        return header_token
    authorization = request.headers.get("authorization", "")
    if authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or None
    return request.cookies.get(SESSION_COOKIE)


async def require_admin(request: Request) -> str:
    """Dependency: exige sessão de admin válida (401 caso contrário). Roda no event loop."""
    token = session_token_from(request)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Não autenticado")
    if not get_services(request).sessions.is_valid(token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sessão inválida ou expirada")
    return token
