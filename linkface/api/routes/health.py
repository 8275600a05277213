"""
Route: GET /health
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from linkface import __version__
from linkface.api.deps import Services, get_services
from linkface.api.schemas.responses import HealthResponse
from linkface.infrastructure.db.database import ping

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health(services: Services = Depends(get_services)):
    db_ok = ping(services.engine)
    return HealthResponse(
        status="ok" if db_ok else "degraded",
        timestamp=datetime.now(timezone.utc).isoformat(),
        database="connected" if db_ok else "unreachable",
        storage=services.storage.backend.value,
        version=__version__,
    )
