"""Queue endpoints: add, list, delete, undo, and fallback sync.

These handlers are synchronous on purpose: store calls block, so FastAPI
runs them in its threadpool instead of on the event loop.
"""

from fastapi import APIRouter
from kungfu import Error, Ok

from kiosk.api.dependencies import QueueManagerDep
from kiosk.errors import KioskError, NotFoundError
from kiosk.models.patient import (
    AddPatientRequest,
    AddPatientResponse,
    DeletePatientResponse,
    PatientListResponse,
    PatientOut,
    PatientRecord,
    QueueStatusResponse,
    SyncResponse,
    UndoResponse,
)
from kiosk.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Queue"])


def _out(records: list[PatientRecord]) -> list[PatientOut]:
    return [PatientOut(**record.as_dict()) for record in records]


@router.post("/add-patient", response_model=AddPatientResponse)
def add_patient(request: AddPatientRequest, manager: QueueManagerDep) -> AddPatientResponse:
    """Issue the next token and queue the patient.

    Falls back to in-memory storage when the database is unreachable; the
    response then reports ``Degraded`` with ``storage="fallback"``.
    """
    logger.info(f"Adding patient {request.name!r}, age {request.age}")
    try:
        outcome = manager.add_patient(request.name, request.age)
    except Exception as e:
        logger.error(f"Unexpected error while adding patient: {e}", exc_info=True)
        raise KioskError("Unexpected server error") from e

    return AddPatientResponse(
        status="Degraded" if outcome.degraded else "Success",
        token=outcome.record.token,
        name=outcome.record.name,
        age=outcome.record.age,
        storage=outcome.storage,
    )


@router.get("/patients", response_model=PatientListResponse)
def list_patients(manager: QueueManagerDep) -> PatientListResponse:
    """List queued patients in insertion order."""
    match manager.list_patients():
        case Ok(records):
            return PatientListResponse(patients=_out(records), store_available=True)
        case Error(e):
            logger.warning(f"Returning empty queue, store unavailable: {e}")
            return PatientListResponse(patients=[], store_available=False)


@router.delete("/patients/{token}", response_model=DeletePatientResponse)
def delete_patient(token: str, manager: QueueManagerDep) -> DeletePatientResponse:
    """Delete a queued patient by exact token."""
    match manager.delete_patient_by_token(token):
        case Ok(0):
            raise NotFoundError(f"No patient found with token {token}")
        case Ok(rows):
            return DeletePatientResponse(status="DELETED", token=token, deleted=rows)
        case Error(e):
            raise e


@router.post("/undo", response_model=UndoResponse)
def undo_last_entry(manager: QueueManagerDep) -> UndoResponse:
    """Remove the most recently added patient."""
    outcome = manager.undo_last_entry()
    return UndoResponse(
        status=outcome.status,
        token=outcome.record.token if outcome.record else None,
        deleted=outcome.rows_deleted,
    )


@router.post("/queue/sync", response_model=SyncResponse)
def sync_fallback(manager: QueueManagerDep) -> SyncResponse:
    """Flush records held in fallback storage into the database."""
    outcome = manager.sync_fallback()
    return SyncResponse(synced=_out(outcome.synced), pending=_out(outcome.pending))


@router.get("/queue/status", response_model=QueueStatusResponse)
def queue_status(manager: QueueManagerDep) -> QueueStatusResponse:
    """Undo depth, fallback size, and store reachability."""
    status = manager.status()
    return QueueStatusResponse(
        undo_depth=status.undo_depth,
        fallback_size=status.fallback_size,
        store_available=status.store_available,
    )
