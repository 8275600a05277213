"""
Exceções do domínio de submissões.

Cada exceção carrega o status HTTP correspondente; a camada de API
só converte para {ok: false, error}. O núcleo não depende do FastAPI.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from linkface.infrastructure.ratelimit.fixed_window import RateLimitDecision


class SubmissionError(Exception):
    """Base para falhas esperadas do pipeline de submissão."""

    status_code: int = 500
    default_message: str = "Erro interno."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)
        # Preenchido pelo pipeline depois da checagem de rate limit
        self.rate_limit: RateLimitDecision | None = None


class RateLimitedError(SubmissionError):
    status_code = 429
    default_message = "Muitas requisições. Tente novamente mais tarde."

    def __init__(self, decision: RateLimitDecision, now: float):
        super().__init__()
        self.rate_limit = decision
        self.retry_after = max(0, math.ceil(decision.reset_time - now))


class MissingFieldsError(SubmissionError):
    status_code = 400
    default_message = "Campos obrigatórios ausentes."


class InvalidCPFError(SubmissionError):
    status_code = 422
    default_message = "CPF inválido."


class ConsentRequiredError(SubmissionError):
    status_code = 400
    default_message = "É necessário aceitar o termo de consentimento."


class EmployeeNotFoundError(SubmissionError):
    status_code = 404
    default_message = "Token não encontrado."


class InvalidPhotoError(SubmissionError):
    status_code = 400
    default_message = "Foto inválida."


class ImageValidationError(SubmissionError):
    status_code = 400
    default_message = "Imagem inválida."


class UploadFailedError(SubmissionError):
    status_code = 500
    default_message = "Erro ao fazer upload da foto."


class InvalidRequestError(SubmissionError):
    status_code = 400
    default_message = "Requisição inválida."
