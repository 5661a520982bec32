# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Base class for Cassandra-backed repositories."""

from typing import TYPE_CHECKING, Any

from cassandra import DriverException
from cassandra.cluster import NoHostAvailable

from src.core.errors import ServerError
from src.core.logging import get_logger


if TYPE_CHECKING:
    from cassandra.cluster import ResultSet, Session


logger = get_logger(__name__)


class CassandraStore:
    """Holds the session and keyspace, prepares statements once.

    Subclasses implement ``_prepare_statements``. All queries go through
    ``_execute`` so driver failures surface as ``ServerError`` and never leak
    driver details to callers.
    """

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        raise NotImplementedError

    async def _execute(self, statement: Any, params: Any = None) -> "ResultSet":
        try:
            return await self.session.aexecute(statement, params)
        except (DriverException, NoHostAvailable) as e:
            logger.error(
                "cassandra_query_failed",
                store=type(self).__name__,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise ServerError() from e
