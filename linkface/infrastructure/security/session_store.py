"""
Admin session store + credential check.

Sessões em memória com expiração absoluta; reiniciar o processo
invalida todas. Credenciais comparadas em tempo constante.
"""

import asyncio
import hashlib
import hmac
import logging
import secrets
import time
from typing import Callable, Dict

logger = logging.getLogger(__name__)

SESSION_COOKIE = "admin_session"
SESSION_HEADER = "x-session-token"


def _digest(value: str) -> bytes:
    return hashlib.sha256(value.encode("utf-8")).digest()


def verify_admin_credentials(
    password: str | None,
    token: str | None,
    admin_password: str,
    admin_token: str = "",
) -> bool:
    """Senha estática ou token estático (se configurado)."""
    if token and admin_token and hmac.compare_digest(_digest(token), _digest(admin_token)):
        return True
    if password and admin_password and hmac.compare_digest(_digest(password), _digest(admin_password)):
        return True
    return False


class AdminSessionStore:
    """Conjunto de tokens de sessão válidos, cada um com expiração absoluta."""

    def __init__(self, ttl_seconds: float = 24 * 60 * 60, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # Structure: {token: expires_at}
        self._sessions: Dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> str:
        token = secrets.token_urlsafe(32)
        self._sessions[token] = self._clock() + self.ttl_seconds
        return token

    def is_valid(self, token: str | None) -> bool:
        if not token:
            return False
        expires_at = self._sessions.get(token)
        if expires_at is None:
            return False
        if self._clock() >= expires_at:
            del self._sessions[token]
            return False
        return True

    def revoke(self, token: str | None) -> None:
        if token:
            self._sessions.pop(token, None)

    def sweep(self) -> int:
        now = self._clock()
        expired = [t for t, exp in self._sessions.items() if exp <= now]
        for t in expired:
            del self._sessions[t]
        return len(expired)

    async def run_sweeper(self, interval_seconds: float = 300.0) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            removed = self.sweep()
            if removed:
                logger.debug(f"Expired {removed} admin sessions")
