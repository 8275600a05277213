"""
Database Models — SQLAlchemy.

Tables:
  - employees: funcionários com token de indicação
  - submissions: fotos coletadas com consentimento
"""

from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, Boolean, DateTime, Text
from sqlalchemy.orm import DeclarativeBase

from linkface.core.entities.employee import Employee
from linkface.core.entities.submission import Submission


def utcnow() -> datetime:
    """UTC sem tzinfo (SQLite não guarda fuso)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class EmployeeRecord(Base):
    """Funcionário; o token é único e nunca muda."""
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    cpf = Column(String(20), nullable=False)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    token = Column(String(64), unique=True, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, index=True)

    def __repr__(self):
        return f"<Employee {self.id} {self.name!r} token={self.token[:8]}...>"

    def to_entity(self) -> Employee:
        return Employee(
            id=self.id,
            name=self.name,
            cpf=self.cpf,
            token=self.token,
            phone=self.phone,
            email=self.email,
            created_at=self.created_at,
        )


class SubmissionRecord(Base):
    """Submissão. employee_token não é FK: integridade não é checada aqui."""
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_token = Column(String(64), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    cpf = Column(String(20), nullable=False)
    photo_path = Column(Text, nullable=False)
    drive_file_id = Column(Text, nullable=True)
    consent_accepted = Column(Boolean, default=False)
    created_at = Column(DateTime, default=utcnow, index=True)

    def __repr__(self):
        return f"<Submission {self.id} {self.name!r}>"

    def to_entity(self) -> Submission:
        return Submission(
            id=self.id,
            name=self.name,
            cpf=self.cpf,
            photo_path=self.photo_path,
            employee_token=self.employee_token,
            drive_file_id=self.drive_file_id,
            consent_accepted=bool(self.consent_accepted),
            created_at=self.created_at,
        )
