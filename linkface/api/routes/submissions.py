"""
Route: POST /submissions — envio público de nome, CPF e foto.

O corpo é lido cru: o rate limit é consumido antes da validação do
schema, e só depois o pipeline (bloqueante) roda no threadpool.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from linkface.api.deps import Services, get_services
from linkface.api.schemas.requests import SubmissionRequest
from linkface.api.schemas.responses import ErrorResponse, SubmissionResponse
from linkface.core.exceptions import InvalidRequestError, RateLimitedError, SubmissionError
from linkface.core.use_cases.submit_photo import SubmissionInput
from linkface.infrastructure.ratelimit.fixed_window import RateLimitDecision, client_identifier

logger = logging.getLogger(__name__)

router = APIRouter()

SUBMISSION_BODY_SCHEMA = {
    "requestBody": {
        "required": True,
        "content": {"application/json": {"schema": SubmissionRequest.model_json_schema(by_alias=True)}},
    }
}


def _rate_limit_headers(decision: RateLimitDecision | None) -> dict[str, str]:
    if decision is None:
        return {}
    return {
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": str(int(decision.reset_time)),
    }


async def _read_json(request: Request):
    try:
        return await request.json()
    except ValueError:
        return None


@router.post("/submissions", response_model=SubmissionResponse, openapi_extra=SUBMISSION_BODY_SCHEMA)
async def create_submission(
    request: Request,
    background_tasks: BackgroundTasks,
    services: Services = Depends(get_services),
):
    """
    Recebe {token?, name, cpf, photoDataUrl, consentAccepted}.

    - 429 rate limit (com retryAfter)
    - 400 corpo inválido, campos ausentes, foto malformada, sem consentimento, imagem inválida
    - 422 CPF inválido
    - 404 token desconhecido
    - 500 falha de upload / erro interno
    """
    payload = await _read_json(request)
    token = payload.get("token") if isinstance(payload, dict) else None
    peer = request.client.host if request.client else None
    client_address = client_identifier(None, request.headers, peer)
    identifier = token if isinstance(token, str) and token else client_address

    use_case = services.submit_photo
    decision = None
    try:
        # Limiter só é tocado no event loop
        decision = use_case.check_rate_limit(identifier)

        try:
            body = SubmissionRequest.model_validate(payload)
        except ValidationError as e:
            logger.info(f"Invalid submission body: {[err['loc'] for err in e.errors()]}")
            raise InvalidRequestError()

        data = SubmissionInput(
            name=body.name,
            cpf=body.cpf,
            photo_data_url=body.photo_data_url,
            consent_accepted=body.consent_accepted,
            token=body.token or None,
            client_address=client_address,
        )
        outcome = await run_in_threadpool(use_case.execute, data, decision)
    except SubmissionError as e:
        if e.rate_limit is None:
            e.rate_limit = decision
        headers = _rate_limit_headers(e.rate_limit)
        error = ErrorResponse(error=e.message)
        if isinstance(e, RateLimitedError):
            error.retry_after = e.retry_after
            headers["Retry-After"] = str(e.retry_after)
        return JSONResponse(
            status_code=e.status_code,
            content=error.model_dump(by_alias=True, exclude_none=True),
            headers=headers,
        )
    except Exception:
        logger.exception("Unexpected error while processing submission")
        return JSONResponse(
            status_code=500,
            content={"ok": False, "error": "Erro interno."},
            headers=_rate_limit_headers(decision),
        )

    if outcome.should_notify:
        background_tasks.add_task(use_case.dispatch_notification, outcome)

    response = SubmissionResponse(
        submission_id=outcome.submission_id,
        file_id=outcome.file_id,
        url=outcome.url,
    )
    return JSONResponse(
        content=response.model_dump(by_alias=True),
        headers=_rate_limit_headers(outcome.rate_limit),
        background=background_tasks,
    )
