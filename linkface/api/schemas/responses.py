"""
Pydantic schemas — Response models para a API.
"""

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = False
    error: str
    retry_after: int | None = Field(default=None, alias="retryAfter")


class SubmissionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    submission_id: int = Field(alias="submissionId")
    file_id: str | None = Field(default=None, alias="fileId")
    url: str | None = None


class AuthResponse(BaseModel):
    ok: bool = True
    token: str


class EmployeeResponse(BaseModel):
    id: int
    name: str
    cpf: str
    phone: str | None = None
    email: str | None = None
    token: str
    link: str
    created_at: str | None = None


class StatsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    today: int
    by_employee: list[dict] = Field(default_factory=list, alias="byEmployee")


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    database: str
    storage: str
    version: str
