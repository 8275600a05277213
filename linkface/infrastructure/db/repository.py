"""
Repositories — CRUD simples para funcionários e submissões.

Cada operação é um comando isolado; nenhuma invariante entre
registros é garantida aqui (ex: submissions.employee_token não é
checado contra employees.token).
"""

import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy import desc, func, or_
from sqlalchemy.orm import sessionmaker

from linkface.core.entities.employee import Employee
from linkface.core.entities.submission import Submission
from linkface.infrastructure.db.database import get_db
from linkface.infrastructure.db.models import EmployeeRecord, SubmissionRecord, utcnow

logger = logging.getLogger(__name__)


class EmployeeRepository:
    """Repository for employees / referral tokens."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def create(
        self,
        name: str,
        cpf: str,
        token: str,
        phone: str | None = None,
        email: str | None = None,
    ) -> Employee:
        with get_db(self._session_factory) as db:
            record = EmployeeRecord(
                name=name,
                cpf=cpf,
                phone=phone or None,
                email=email or None,
                token=token,
            )
            db.add(record)
            db.flush()
            logger.info(f"Created employee {record.id}")
            return record.to_entity()

    def find_by_token(self, token: str) -> Optional[Employee]:
        with get_db(self._session_factory) as db:
            record = db.query(EmployeeRecord).filter_by(token=token).first()
            return record.to_entity() if record else None

    def list_all(self) -> list[Employee]:
        with get_db(self._session_factory) as db:
            records = db.query(EmployeeRecord).order_by(
                desc(EmployeeRecord.created_at), desc(EmployeeRecord.id)
            ).all()
            return [r.to_entity() for r in records]


class SubmissionRepository:
    """Repository for photo submissions."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def insert(
        self,
        name: str,
        cpf: str,
        photo_path: str,
        employee_token: str | None = None,
        drive_file_id: str | None = None,
        consent_accepted: bool = False,
    ) -> int:
        """Insere e devolve o id gerado."""
        with get_db(self._session_factory) as db:
            record = SubmissionRecord(
                employee_token=employee_token,
                name=name,
                cpf=cpf,
                photo_path=photo_path,
                drive_file_id=drive_file_id,
                consent_accepted=consent_accepted,
            )
            db.add(record)
            db.flush()
            logger.info(f"Saved submission {record.id}")
            return record.id

    def list_all(self, limit: int = 100, offset: int = 0, employee_token: str | None = None) -> list[Submission]:
        """Mais recentes primeiro, com filtro opcional por token."""
        with get_db(self._session_factory) as db:
            query = db.query(SubmissionRecord)
            if employee_token:
                query = query.filter_by(employee_token=employee_token)
            records = (
                query.order_by(desc(SubmissionRecord.created_at), desc(SubmissionRecord.id))
                .offset(offset)
                .limit(limit)
                .all()
            )
            return [r.to_entity() for r in records]

    def search(self, term: str, limit: int = 100) -> list[Submission]:
        """Busca por substring em nome ou CPF."""
        pattern = f"%{term}%"
        with get_db(self._session_factory) as db:
            records = (
                db.query(SubmissionRecord)
                .filter(or_(SubmissionRecord.name.like(pattern), SubmissionRecord.cpf.like(pattern)))
                .order_by(desc(SubmissionRecord.created_at), desc(SubmissionRecord.id))
                .limit(limit)
                .all()
            )
            return [r.to_entity() for r in records]

    def get_by_id(self, submission_id: int) -> Optional[Submission]:
        with get_db(self._session_factory) as db:
            record = db.get(SubmissionRecord, submission_id)
            return record.to_entity() if record else None

    def get_stats(self) -> dict:
        """Total, total de hoje (UTC) e contagem por token de funcionário."""
        start_of_day = utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
        with get_db(self._session_factory) as db:
            total = db.query(SubmissionRecord).count()
            today = (
                db.query(SubmissionRecord)
                .filter(SubmissionRecord.created_at >= start_of_day)
                .filter(SubmissionRecord.created_at < start_of_day + timedelta(days=1))
                .count()
            )
            count_col = func.count(SubmissionRecord.id).label("count")
            rows = (
                db.query(SubmissionRecord.employee_token, count_col)
                .filter(SubmissionRecord.employee_token.isnot(None))
                .group_by(SubmissionRecord.employee_token)
                .order_by(desc(count_col))
                .all()
            )
            return {
                "total": total,
                "today": today,
                "by_employee": [{"employee_token": token, "count": count} for token, count in rows],
            }
