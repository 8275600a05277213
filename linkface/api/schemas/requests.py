"""
Pydantic schemas — Request bodies.

Campos obrigatórios são opcionais aqui: a ausência é tratada pelo
pipeline (400 com mensagem própria), não pela validação do FastAPI.
"""

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class SubmissionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str | None = None
    name: str | None = None
    cpf: str | None = None
    photo_data_url: str | None = Field(default=None, alias="photoDataUrl")
    # Só o booleano JSON true vale como consentimento ("yes", 1 etc. são rejeitados)
    consent_accepted: StrictBool = Field(default=False, alias="consentAccepted")


class AuthRequest(BaseModel):
    password: str | None = None
    token: str | None = None


class EmployeeCreateRequest(BaseModel):
    name: str | None = None
    cpf: str | None = None
    phone: str | None = None
    email: str | None = None
