"""Database connection provisioning.

The provisioner hands out live connections to the patient store. When the
target database does not exist yet it connects to the server without a
database, creates it, and retries once. Every connection it returns has had
the ``patients`` table created if missing.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Connection, Engine, create_engine, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from kiosk.config import DatabaseConfig
from kiosk.errors import StoreUnavailableError
from kiosk.store.tables import Base
from kiosk.utils.logging import get_logger

logger = get_logger(__name__)


def _is_sqlite(url: URL) -> bool:
    return url.get_backend_name() == "sqlite"


def _is_sqlite_memory(url: URL) -> bool:
    return _is_sqlite(url) and url.database in (None, "", ":memory:")


def build_engine(url: URL, echo: bool = False) -> Engine:
    """Create an engine suited to the backend behind ``url``."""
    if _is_sqlite_memory(url):
        # One shared connection, otherwise every checkout sees an empty database
        return create_engine(
            url, echo=echo, connect_args={"check_same_thread": False}, poolclass=StaticPool
        )
    if _is_sqlite(url):
        return create_engine(url, echo=echo, connect_args={"check_same_thread": False})
    return create_engine(url, echo=echo, pool_pre_ping=True)


class ConnectionProvisioner:
    """Lazily bootstraps and hands out connections to the patient store."""

    def __init__(self, config: DatabaseConfig | None = None):
        """Initialize provisioner.

        Args:
            config: Database configuration (defaults to a local SQLite file)
        """
        self.config = config or DatabaseConfig()
        self.url = make_url(self.config.url)
        self.engine = build_engine(self.url, echo=self.config.echo)

    def get_connection(self) -> Connection:
        """Return an open connection with the patients table in place.

        Raises:
            StoreUnavailableError: If both the first attempt and the
                create-database-then-retry attempt fail, or the connection
                breaks while the table is being prepared
        """
        try:
            conn = self.engine.connect()
        except SQLAlchemyError as first_error:
            logger.warning(f"Connection to {self.safe_url()} failed, attempting to create database: {first_error}")
            try:
                self._create_database()
            except SQLAlchemyError as create_error:
                raise StoreUnavailableError(
                    f"Failed to connect and failed to create database: {first_error} | {create_error}"
                ) from create_error

            try:
                conn = self.engine.connect()
            except SQLAlchemyError as retry_error:
                raise StoreUnavailableError(f"Failed to connect after creating database: {retry_error}") from retry_error

        try:
            self._ensure_table(conn)
        except SQLAlchemyError as e:
            conn.close()
            raise StoreUnavailableError(f"Connection broke while preparing the patients table: {e}") from e
        return conn

    @contextmanager
    def connection(self) -> Iterator[Connection]:
        """Context manager that always closes the connection it opened."""
        conn = self.get_connection()
        try:
            yield conn
        finally:
            conn.close()

    def ping(self) -> bool:
        """Check whether the store accepts connections."""
        try:
            with self.connection() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except (StoreUnavailableError, SQLAlchemyError) as e:
            logger.warning(f"Store ping failed: {e}")
            return False

    def dispose(self) -> None:
        self.engine.dispose()

    def _create_database(self) -> None:
        """Create the target database on its server if it is missing."""
        database = self.url.database
        if _is_sqlite(self.url) or not database:
            # SQLite creates its file on connect; nothing to bootstrap
            return

        server_engine = create_engine(self.url.set(database=None), isolation_level="AUTOCOMMIT")
        try:
            quoted = server_engine.dialect.identifier_preparer.quote(database)
            if self.url.get_backend_name() == "mysql":
                statement = (
                    f"CREATE DATABASE IF NOT EXISTS {quoted} "
                    "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
                )
            else:
                statement = f"CREATE DATABASE {quoted}"

            with server_engine.connect() as conn:
                conn.execute(text(statement))
            logger.info(f"Created database {database}")
        finally:
            server_engine.dispose()

    def _ensure_table(self, conn: Connection) -> None:
        """Create the patients table if missing; failures are only logged."""
        try:
            Base.metadata.create_all(conn, checkfirst=True)
            conn.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to ensure patients table exists: {e}")
            conn.rollback()

    def safe_url(self) -> str:
        return self.url.render_as_string(hide_password=True)
