"""Cassandra connection and schema management.

Provides:
- Cluster/session lifecycle (cassandra-asyncio-driver, sessions expose
  ``aexecute()`` for non-blocking queries)
- Keyspace and table initialization from each module's CQL templates
"""

from cassandra.auth import PlainTextAuthProvider
from cassandra.cluster import Session
from cassandra.policies import DCAwareRoundRobinPolicy, TokenAwarePolicy
from cassandra_asyncio.cluster import Cluster

from src.config.settings import get_settings
from src.core.logging import get_logger
from src.courses.models import COURSES_TABLES_CQL
from src.curriculum.models import CURRICULUM_TABLES_CQL
from src.enrollments.models import ENROLLMENTS_TABLES_CQL
from src.progress.models import PROGRESS_TABLES_CQL


logger = get_logger(__name__)

SCHEMA: dict[str, list[str]] = {
    "courses": COURSES_TABLES_CQL,
    "enrollments": ENROLLMENTS_TABLES_CQL,
    "curriculum": CURRICULUM_TABLES_CQL,
    "progress": PROGRESS_TABLES_CQL,
}


class CassandraConnection:
    """Cassandra connection manager (one cluster/session per process)."""

    _cluster: Cluster | None = None
    _session: Session | None = None

    @classmethod
    def connect(cls) -> Session:
        """Establish connection to the Cassandra cluster.

        Raises:
            ConnectionError: If connection fails
        """
        if cls._session is not None:
            return cls._session

        settings = get_settings()

        auth_provider = None
        if settings.cassandra_auth_configured:
            auth_provider = PlainTextAuthProvider(
                username=settings.cassandra_username,
                password=settings.cassandra_password,
            )

        cls._cluster = Cluster(
            contact_points=settings.cassandra_hosts,
            port=settings.cassandra_port,
            auth_provider=auth_provider,
            protocol_version=settings.cassandra_protocol_version,
            load_balancing_policy=TokenAwarePolicy(
                DCAwareRoundRobinPolicy(local_dc=settings.cassandra_datacenter)
            ),
            connect_timeout=settings.cassandra_connect_timeout,
        )

        try:
            cls._session = cls._cluster.connect()
        except Exception as e:
            logger.error("cassandra_connection_failed", error=str(e))
            raise ConnectionError(f"Failed to connect to Cassandra: {e}") from e

        cls._session.default_timeout = settings.cassandra_request_timeout
        logger.info(
            "cassandra_connected",
            hosts=settings.cassandra_hosts,
            port=settings.cassandra_port,
        )
        return cls._session

    @classmethod
    def disconnect(cls) -> None:
        """Close connection to Cassandra."""
        if cls._session is not None:
            cls._session.shutdown()
            cls._session = None
        if cls._cluster is not None:
            cls._cluster.shutdown()
            cls._cluster = None
            logger.info("cassandra_disconnected")

    @classmethod
    def is_connected(cls) -> bool:
        """Check if connection is active."""
        return cls._session is not None and not cls._session.is_shutdown


async def init_keyspace(session: Session, keyspace: str) -> None:
    """Create keyspace if it does not exist."""
    settings = get_settings()

    if settings.is_development or settings.is_testing:
        replication = "'class': 'SimpleStrategy', 'replication_factor': 1"
    else:
        replication = (
            "'class': 'NetworkTopologyStrategy', "
            f"'{settings.cassandra_datacenter}': "
            f"{settings.cassandra_replication_factor}"
        )

    await session.aexecute(f"""
        CREATE KEYSPACE IF NOT EXISTS {keyspace}
        WITH replication = {{{replication}}}
        AND durable_writes = true
    """)
    logger.info("keyspace_created", keyspace=keyspace)


async def init_tables(session: Session, keyspace: str) -> None:
    """Create every module's tables."""
    for module, statements in SCHEMA.items():
        for cql_template in statements:
            await session.aexecute(cql_template.format(keyspace=keyspace))
        logger.info("tables_created", module=module, keyspace=keyspace)


async def init_cassandra() -> Session:
    """Connect and make sure keyspace and tables exist."""
    settings = get_settings()

    session = CassandraConnection.connect()
    await init_keyspace(session, settings.cassandra_keyspace)
    session.set_keyspace(settings.cassandra_keyspace)
    await init_tables(session, settings.cassandra_keyspace)

    logger.info("cassandra_initialized", keyspace=settings.cassandra_keyspace)
    return session


async def shutdown_cassandra() -> None:
    """Shutdown Cassandra connection."""
    CassandraConnection.disconnect()
