"""Single-statement operations against the patients table.

Each operation acquires its own connection and returns a tagged result so
callers decide explicitly what to do when the store is down.
"""

from kungfu import Error, Ok, Result
from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import SQLAlchemyError

from kiosk.errors import StoreUnavailableError
from kiosk.models.patient import PatientRecord
from kiosk.store.connection import ConnectionProvisioner
from kiosk.store.tables import PatientRow
from kiosk.utils.logging import get_logger

logger = get_logger(__name__)

type StoreResult[T] = Result[T, StoreUnavailableError]


def _as_store_error(action: str, error: Exception) -> StoreUnavailableError:
    if isinstance(error, StoreUnavailableError):
        return error
    return StoreUnavailableError(f"Failed to {action}: {error}")


class PatientRepository:
    """CRUD access to the patients table."""

    def __init__(self, provisioner: ConnectionProvisioner):
        self.provisioner = provisioner

    def insert(self, record: PatientRecord) -> StoreResult[PatientRecord]:
        """Insert one patient row."""
        try:
            with self.provisioner.connection() as conn:
                conn.execute(insert(PatientRow).values(name=record.name, age=record.age, token=record.token))
                conn.commit()
        except (StoreUnavailableError, SQLAlchemyError) as e:
            logger.error(f"Insert of {record.token} failed: {e}")
            return Error(_as_store_error("insert patient", e))
        return Ok(record)

    def delete_by_token(self, token: str) -> StoreResult[int]:
        """Delete rows with an exact token match and return how many went."""
        try:
            with self.provisioner.connection() as conn:
                result = conn.execute(delete(PatientRow).where(PatientRow.token == token))
                conn.commit()
        except (StoreUnavailableError, SQLAlchemyError) as e:
            logger.error(f"Delete of {token} failed: {e}")
            return Error(_as_store_error("delete patient", e))
        return Ok(result.rowcount or 0)

    def list_all(self) -> StoreResult[list[PatientRecord]]:
        """All rows in insertion order."""
        statement = select(PatientRow.name, PatientRow.age, PatientRow.token).order_by(PatientRow.id)
        try:
            with self.provisioner.connection() as conn:
                rows = conn.execute(statement).all()
        except (StoreUnavailableError, SQLAlchemyError) as e:
            logger.error(f"Listing patients failed: {e}")
            return Error(_as_store_error("list patients", e))
        return Ok([PatientRecord(name=row.name or "", age=row.age or 0, token=row.token or "") for row in rows])

    def max_token(self, prefix: str) -> StoreResult[str | None]:
        """The greatest token carrying ``prefix``, or None for an empty table.

        Sorting by length first keeps ``HOS1000`` above ``HOS999``.
        """
        statement = (
            select(PatientRow.token)
            .where(PatientRow.token.startswith(prefix, autoescape=True))
            .order_by(func.length(PatientRow.token).desc(), PatientRow.token.desc())
            .limit(1)
        )
        try:
            with self.provisioner.connection() as conn:
                token = conn.execute(statement).scalar_one_or_none()
        except (StoreUnavailableError, SQLAlchemyError) as e:
            logger.error(f"Reading the latest token failed: {e}")
            return Error(_as_store_error("read latest token", e))
        return Ok(token)
