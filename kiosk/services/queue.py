"""Queue manager: token issuance, undo, and fallback storage."""

import threading

from kungfu import Error, Ok, Result

from kiosk.errors import StoreUnavailableError
from kiosk.models.patient import AddOutcome, PatientRecord, QueueStatus, SyncOutcome, UndoOutcome
from kiosk.services.tokens import TokenAllocator
from kiosk.store.connection import ConnectionProvisioner
from kiosk.store.repository import PatientRepository
from kiosk.utils.logging import get_logger

logger = get_logger(__name__)


class QueueManager:
    """Owns the undo stack and the fallback list for one process.

    Adding a patient never fails from the caller's side: if the store
    rejects the insert the record is kept in memory instead. Listings only
    show the store, so records held in fallback storage stay invisible
    until ``sync_fallback`` runs.
    """

    def __init__(self, provisioner: ConnectionProvisioner, token_prefix: str = "HOS"):
        """Initialize queue manager.

        Args:
            provisioner: Source of store connections
            token_prefix: Prefix for issued tokens
        """
        self.provisioner = provisioner
        self.repository = PatientRepository(provisioner)
        self.allocator = TokenAllocator(self.repository, prefix=token_prefix)
        self.undo_stack: list[PatientRecord] = []
        self.fallback: list[PatientRecord] = []
        # Serialises read-max-then-insert and all mutation of in-memory state
        self._lock = threading.RLock()

    def add_patient(self, name: str, age: int) -> AddOutcome:
        """Issue a token and queue the patient."""
        with self._lock:
            token = self.allocator.next_token(reserved=[r.token for r in self.fallback])
            record = PatientRecord(name=name, age=age, token=token)

            match self.repository.insert(record):
                case Ok(_):
                    storage = "store"
                    logger.info(f"Patient added (store): {token}")
                case Error(e):
                    storage = "fallback"
                    self.fallback.append(record)
                    logger.warning(f"Patient added (in-memory fallback): {token} ({e})")

            self.undo_stack.append(record)
            return AddOutcome(record=record, storage=storage)

    def delete_patient_by_token(self, token: str) -> Result[int, StoreUnavailableError]:
        """Delete the store row with this token.

        Fallback records are not searched.
        """
        result = self.repository.delete_by_token(token)
        match result:
            case Ok(0):
                logger.info(f"No patient found with token {token}")
            case Ok(rows):
                logger.info(f"Patient with token {token} deleted ({rows} row(s))")
        return result

    def undo_last_entry(self) -> UndoOutcome:
        """Remove the most recently added patient.

        A record still waiting in fallback storage is dropped from there so
        a later sync cannot bring it back; anything else is deleted from the
        store by token.
        """
        with self._lock:
            if not self.undo_stack:
                logger.info("No patient to undo")
                return UndoOutcome(record=None)
            last = self.undo_stack.pop()

            for index, pending in enumerate(self.fallback):
                if pending is last:
                    del self.fallback[index]
                    logger.info(f"Undo removed {last.token} from fallback storage")
                    return UndoOutcome(record=last, removed_from_fallback=True)

        match self.delete_patient_by_token(last.token):
            case Ok(rows):
                return UndoOutcome(record=last, rows_deleted=rows)
            case Error(_):
                return UndoOutcome(record=last, store_available=False)

    def list_patients(self) -> Result[list[PatientRecord], StoreUnavailableError]:
        """All store rows in insertion order; fallback records are excluded."""
        return self.repository.list_all()

    def sync_fallback(self) -> SyncOutcome:
        """Move fallback records into the store, oldest first.

        Stops at the first failed insert; that record and everything after
        it stay pending.
        """
        with self._lock:
            outcome = SyncOutcome()
            while self.fallback:
                record = self.fallback[0]
                match self.repository.insert(record):
                    case Ok(_):
                        self.fallback.pop(0)
                        outcome.synced.append(record)
                    case Error(e):
                        logger.warning(f"Fallback sync halted at {record.token}: {e}")
                        break

            outcome.pending = list(self.fallback)
            if outcome.synced:
                logger.info(f"Synced {len(outcome.synced)} fallback record(s), {len(outcome.pending)} pending")
            return outcome

    def status(self) -> QueueStatus:
        with self._lock:
            undo_depth = len(self.undo_stack)
            fallback_size = len(self.fallback)
        return QueueStatus(
            undo_depth=undo_depth,
            fallback_size=fallback_size,
            store_available=self.provisioner.ping(),
        )
