"""Readiness probing for a freshly started postgres container.

Readiness means a fresh connection can be opened with the fixed test
credentials *and* ``SELECT 1`` succeeds on it; a socket that accepts but
cannot answer a query is not ready.
"""

import asyncio
import math
from typing import Optional

import psycopg
import structlog

from ..models.errors import ReadinessTimeoutError
from ..models.instance import PostgresCredentials, ProbeAttempt

logger = structlog.get_logger(__name__)

LIVENESS_QUERY = "SELECT 1"


class ReadinessProber:
    """Polls postgres at a fixed interval until it answers a trivial query."""

    def __init__(self, connect_timeout: int = 2, log=None):
        self._connect_timeout = connect_timeout
        self._log = log or logger

    async def wait_ready(
        self,
        port: int,
        credentials: Optional[PostgresCredentials] = None,
        timeout: float = 20.0,
        interval: float = 1.0,
    ) -> ProbeAttempt:
        """Block until postgres on ``port`` answers ``SELECT 1``.

        Every attempt is charged ``interval`` seconds against ``timeout``
        before it runs, so ``timeout=3, interval=1`` allows exactly three
        attempts.

        Args:
            port: Host port the container's postgres port is bound to
            credentials: Connection credentials (defaults to postgres/postgres)
            timeout: Total wait budget in seconds
            interval: Sleep between failed attempts in seconds

        Returns:
            The successful ProbeAttempt

        Raises:
            ReadinessTimeoutError: if no probe succeeded within ``timeout``
        """
        credentials = credentials or PostgresCredentials()
        # Integer budget; accumulating floats drifts (ten 0.1s steps < 1.0)
        max_attempts = max(1, math.ceil(timeout / interval - 1e-9))
        attempt = 0
        last_error: Optional[str] = None

        while attempt < max_attempts:
            attempt += 1
            waited = attempt * interval
            try:
                await self.probe(port, credentials)
            except Exception as e:
                last_error = str(e) or type(e).__name__
                self._log.info(
                    "Connection failed, going to retry",
                    port=port,
                    attempt=attempt,
                    elapsed=waited,
                    error=last_error,
                )
                if attempt < max_attempts:
                    await asyncio.sleep(interval)
                continue

            result = ProbeAttempt(attempt=attempt, elapsed=waited, succeeded=True)
            self._log.info("Postgres is ready", port=port, attempt=attempt)
            return result

        raise ReadinessTimeoutError(
            port=port, timeout=timeout, attempts=attempt, last_error=last_error
        )

    async def probe(self, port: int, credentials: PostgresCredentials) -> None:
        """Open a fresh connection, run the liveness query, close it."""
        conn = await psycopg.AsyncConnection.connect(
            host=credentials.host,
            port=port,
            user=credentials.user,
            password=credentials.password,
            dbname=credentials.database,
            connect_timeout=self._connect_timeout,
        )
        try:
            cursor = await conn.execute(LIVENESS_QUERY)
            await cursor.fetchone()
        finally:
            await conn.close()
