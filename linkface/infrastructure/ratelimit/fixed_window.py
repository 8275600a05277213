"""
Adapter: Fixed-Window Rate Limiter — contador em memória por identificador.

Identificador = token de indicação (se enviado) ou IP do cliente.
Processo único, sem persistência: com mais de uma instância seria
preciso um contador compartilhado (ex: Redis).
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict

logger = logging.getLogger(__name__)


@dataclass
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_time: float        # epoch seconds


@dataclass
class _Window:
    count: int
    reset_time: float


class FixedWindowRateLimiter:
    """
    Janela fixa: a primeira requisição abre a janela (count=1,
    reset = agora + janela); requisições seguintes incrementam até o
    máximo. Chegando em reset_time ou depois, a janela recomeça.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.time,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        # Structure: {identifier: _Window}
        self._windows: Dict[str, _Window] = {}

    def __len__(self) -> int:
        return len(self._windows)

    def check(self, identifier: str) -> RateLimitDecision:
        """Registra uma requisição e decide se ela é permitida."""
        now = self._clock()
        entry = self._windows.get(identifier)

        if entry is None or now >= entry.reset_time:
            reset_time = now + self.window_seconds
            self._windows[identifier] = _Window(count=1, reset_time=reset_time)
            return RateLimitDecision(
                allowed=True,
                limit=self.max_requests,
                remaining=self.max_requests - 1,
                reset_time=reset_time,
            )

        if entry.count >= self.max_requests:
            return RateLimitDecision(
                allowed=False,
                limit=self.max_requests,
                remaining=0,
                reset_time=entry.reset_time,
            )

        entry.count += 1
        return RateLimitDecision(
            allowed=True,
            limit=self.max_requests,
            remaining=self.max_requests - entry.count,
            reset_time=entry.reset_time,
        )

    def sweep(self, now: float | None = None) -> int:
        """Remove janelas expiradas. Retorna quantas foram removidas."""
        current = self._clock() if now is None else now
        expired = [key for key, entry in self._windows.items() if entry.reset_time <= current]
        for key in expired:
            del self._windows[key]
        return len(expired)

    async def run_sweeper(self) -> None:
        """Loop de limpeza — uma varredura por janela. Cancelado no shutdown."""
        while True:
            await asyncio.sleep(self.window_seconds)
            removed = self.sweep()
            if removed:
                logger.debug(f"Rate limiter sweep removed {removed} windows")


def client_identifier(token: str | None, headers, peer_host: str | None = None) -> str:
    """Token explícito tem prioridade sobre o endereço do cliente."""
    if token:
        return token
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return peer_host or "unknown"
