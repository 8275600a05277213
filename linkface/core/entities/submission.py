"""
Entity: Submission

Um registro de coleta de foto com consentimento.
"""

from dataclasses import dataclass, asdict
from datetime import datetime


@dataclass
class Submission:
    """Entidade de domínio: Submissão."""
    id: int
    name: str
    cpf: str
    photo_path: str                       # caminho local, URL ou id no storage
    employee_token: str | None = None     # sem FK: não é checado na escrita
    drive_file_id: str | None = None
    consent_accepted: bool = False
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat() if self.created_at else None
        return data
