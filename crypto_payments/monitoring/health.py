"""
Liveness and readiness checks.

The service has a single external dependency, the payments database.
"""
from typing import Any, Dict, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from crypto_payments.database.connection import get_session_factory

logger = structlog.get_logger(__name__)


class HealthCheckError(Exception):
    """Raised when a dependency check fails."""

    pass


class HealthCheck:
    """Checks the payments database for readiness reporting."""

    def __init__(
        self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None
    ) -> None:
        self._session_factory = session_factory

    async def check_database(self) -> Dict[str, Any]:
        """
        Run SELECT 1 against the payments database.

        Raises:
            HealthCheckError: If the query cannot be executed
        """
        factory = self._session_factory or get_session_factory()
        try:
            async with factory() as session:
                await session.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("database_health_check_failed", error=str(e))
            raise HealthCheckError(f"Database health check failed: {e}") from e
        return {"status": "healthy", "service": "database"}

    async def check_all(self) -> Dict[str, Any]:
        try:
            database = await self.check_database()
        except HealthCheckError as e:
            database = {"status": "unhealthy", "service": "database", "error": str(e)}
        return {"status": database["status"], "checks": {"database": database}}

    async def liveness(self) -> Dict[str, Any]:
        """The process is up; dependencies are not consulted."""
        return {"status": "alive", "message": "Application is running"}

    async def readiness(self) -> Dict[str, Any]:
        return await self.check_all()
