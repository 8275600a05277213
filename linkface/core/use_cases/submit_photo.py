"""
Use Case: Submit Photo.

Orquestra: Rate limit → Campos/CPF/Consentimento → Token →
Decode → Validação da imagem → Compressão → Upload → Persistência
→ (Notificação em background).

Efeitos colaterais estritamente ordenados: nada é persistido antes de
um upload bem-sucedido; nenhum upload antes da validação.
"""

import base64
import binascii
import logging
import re
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable

from linkface.config.logging_config import mask_token
from linkface.core.entities.employee import Employee
from linkface.core.exceptions import (
    ConsentRequiredError,
    EmployeeNotFoundError,
    ImageValidationError,
    InvalidCPFError,
    InvalidPhotoError,
    MissingFieldsError,
    RateLimitedError,
    SubmissionError,
    UploadFailedError,
)
from linkface.core.interfaces.storage_service import IStorageService
from linkface.infrastructure.db.repository import EmployeeRepository, SubmissionRepository
from linkface.infrastructure.imaging.image_compressor import ImageCompressor
from linkface.infrastructure.imaging.image_validator import ImageValidator
from linkface.infrastructure.notifications.notifier import NotificationService
from linkface.infrastructure.ratelimit.fixed_window import FixedWindowRateLimiter, RateLimitDecision
from linkface.infrastructure.rules.cpf_rules import is_valid_cpf, sanitize_file_name

logger = logging.getLogger(__name__)

DATA_URL_PATTERN = re.compile(r"^data:(.+?);base64,(.+)$", re.DOTALL)

EXTENSIONS = {"image/png": "png", "image/webp": "webp"}
MAX_NAME_PART = 80


@dataclass
class SubmissionInput:
    """Input da submissão pública."""
    name: str | None
    cpf: str | None
    photo_data_url: str | None
    consent_accepted: bool = False
    token: str | None = None
    client_address: str = "unknown"


@dataclass
class SubmissionOutcome:
    """Resultado de uma submissão aceita."""
    submission_id: int
    photo_path: str
    file_id: str | None
    url: str | None
    rate_limit: RateLimitDecision
    name: str = ""
    cpf: str = ""
    employee: Employee | None = None
    stage_latencies: dict = field(default_factory=dict)

    @property
    def should_notify(self) -> bool:
        return self.employee is not None and self.employee.has_contact


def build_file_name(name: str, mime_type: str, now_ms: int | None = None) -> str:
    """<random>_<nome sanitizado>_<epoch ms>.<ext>"""
    ext = EXTENSIONS.get(mime_type, "jpg")
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    safe_name = sanitize_file_name(name, max_length=MAX_NAME_PART) or "foto"
    return f"{uuid.uuid4().hex[:8]}_{safe_name}_{stamp}.{ext}"


class SubmitPhotoUseCase:
    """
    Use Case: recebe dados + foto → valida → armazena → persiste.

    Dependency Injection: todas as dependências vêm pelo construtor,
    inclusive o rate limiter (uma instância por processo).
    """

    def __init__(
        self,
        rate_limiter: FixedWindowRateLimiter,
        employees: EmployeeRepository,
        submissions: SubmissionRepository,
        image_validator: ImageValidator,
        compressor: ImageCompressor,
        storage: IStorageService,
        notifier: NotificationService | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._rate_limiter = rate_limiter
        self._employees = employees
        self._submissions = submissions
        self._validator = image_validator
        self._compressor = compressor
        self._storage = storage
        self._notifier = notifier
        self._clock = clock

    def check_rate_limit(self, identifier: str | None) -> RateLimitDecision:
        """Consome uma requisição da janela do identificador."""
        identifier = identifier or "unknown"
        decision = self._rate_limiter.check(identifier)
        if not decision.allowed:
            logger.warning(f"Rate limit exceeded for {mask_token(identifier)}")
            raise RateLimitedError(decision, now=self._clock())
        return decision

    def execute(self, data: SubmissionInput, decision: RateLimitDecision | None = None) -> SubmissionOutcome:
        """
        Executa o pipeline completo.

        Com `decision` o rate limit já foi consumido pelo chamador
        (a API faz isso no event loop e roda o resto em thread).

        Raises:
            SubmissionError (subclasses) — com `rate_limit` preenchido
            sempre que a checagem de rate limit já rodou.
        """
        # ── 1. Rate limit ──────────────────────────────────
        if decision is None:
            decision = self.check_rate_limit(data.token or data.client_address)

        try:
            return self._run(data, decision)
        except SubmissionError as e:
            e.rate_limit = decision
            raise

    def _run(self, data: SubmissionInput, decision: RateLimitDecision) -> SubmissionOutcome:
        stage_latencies: dict[str, float] = {}

        # ── 2. Campos, CPF, consentimento ──────────────────
        name = (data.name or "").strip()
        cpf = (data.cpf or "").strip()
        if not name or not cpf or not data.photo_data_url:
            raise MissingFieldsError()
        if not is_valid_cpf(cpf):
            raise InvalidCPFError()
        if data.consent_accepted is not True:
            raise ConsentRequiredError()

        # ── 3. Token de indicação ──────────────────────────
        employee = None
        if data.token:
            employee = self._employees.find_by_token(data.token)
            if employee is None:
                raise EmployeeNotFoundError()

        # ── 4. Decode do data URL ──────────────────────────
        match = DATA_URL_PATTERN.match(data.photo_data_url)
        if not match:
            raise InvalidPhotoError()
        mime_type, encoded = match.group(1).strip().lower(), match.group(2)

        size_error = self._validator.check_encoded_size(encoded)
        if size_error:
            raise ImageValidationError(size_error)
        try:
            buffer = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            raise InvalidPhotoError()

        # ── 5. Validação da imagem ─────────────────────────
        t0 = time.perf_counter()
        validation = self._validator.validate(encoded, mime_type, buffer)
        stage_latencies["validation_ms"] = round((time.perf_counter() - t0) * 1000, 2)
        if not validation.valid:
            logger.info(
                f"Image rejected: {validation.error} "
                f"(size={len(buffer)}, dims={validation.width}x{validation.height})"
            )
            raise ImageValidationError(validation.error)

        # ── 6. Compressão (best-effort) ────────────────────
        t0 = time.perf_counter()
        compression = self._compressor.compress(buffer, mime_type)
        stage_latencies["compression_ms"] = round((time.perf_counter() - t0) * 1000, 2)
        logger.debug(
            f"Compression {compression.original_size} -> {compression.compressed_size} "
            f"bytes (ratio={compression.ratio:.2f})"
        )

        # ── 7. Nome do arquivo ─────────────────────────────
        file_name = build_file_name(name, mime_type, now_ms=int(self._clock() * 1000))

        # ── 8. Upload ──────────────────────────────────────
        t0 = time.perf_counter()
        try:
            upload = self._storage.upload(compression.buffer, file_name, mime_type)
        except Exception:
            logger.exception(f"Storage backend raised while uploading {file_name}")
            raise UploadFailedError()
        stage_latencies["upload_ms"] = round((time.perf_counter() - t0) * 1000, 2)
        if not upload.success:
            logger.error(f"Upload failed for {file_name}: {upload.error}")
            raise UploadFailedError(upload.error or None)

        # ── 9. Persistência ────────────────────────────────
        photo_path = upload.path or upload.url or upload.file_id or file_name
        storage_file_id = upload.file_id or upload.url
        submission_id = self._submissions.insert(
            name=name,
            cpf=cpf,
            photo_path=photo_path,
            employee_token=data.token or None,
            drive_file_id=storage_file_id,
            consent_accepted=True,
        )
        logger.info(
            f"Submission {submission_id} stored via {self._storage.backend.value} "
            f"(token={mask_token(data.token)})"
        )

        return SubmissionOutcome(
            submission_id=submission_id,
            photo_path=photo_path,
            file_id=storage_file_id,
            url=upload.url,
            rate_limit=decision,
            name=name,
            cpf=cpf,
            employee=employee,
            stage_latencies=stage_latencies,
        )

    # ── 10. Notificação ────────────────────────────────────
    def dispatch_notification(self, outcome: SubmissionOutcome) -> None:
        """Roda em background depois da resposta; falhas só vão para o log."""
        if self._notifier is None or not outcome.should_notify:
            return
        try:
            self._notifier.notify_new_submission(
                client_name=outcome.name,
                client_cpf=outcome.cpf,
                employee_email=outcome.employee.email,
                employee_phone=outcome.employee.phone,
            )
        except Exception:
            logger.exception(f"Notification failed for submission {outcome.submission_id}")
