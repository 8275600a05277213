"""
Entity: Employee

Funcionário que recebe um token de indicação (link público).
Modelo puro — sem dependência de framework ou banco.
"""

from dataclasses import dataclass, asdict
from datetime import datetime


@dataclass
class Employee:
    """Entidade de domínio: Funcionário."""
    id: int
    name: str
    cpf: str
    token: str                     # imutável depois de emitido
    phone: str | None = None
    email: str | None = None
    created_at: datetime | None = None

    @property
    def has_contact(self) -> bool:
        return bool(self.email or self.phone)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat() if self.created_at else None
        return data
