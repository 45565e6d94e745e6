"""Request-scoped access to the services attached to the application."""

from typing import Annotated

from fastapi import Depends, Request

from kiosk.services.identity import IdentityService
from kiosk.services.payments import PaymentService
from kiosk.services.queue import QueueManager


def get_queue_manager(request: Request) -> QueueManager:
    return request.app.state.queue_manager


def get_identity_service(request: Request) -> IdentityService:
    return request.app.state.identity_service


def get_payment_service(request: Request) -> PaymentService:
    return request.app.state.payment_service


QueueManagerDep = Annotated[QueueManager, Depends(get_queue_manager)]
IdentityServiceDep = Annotated[IdentityService, Depends(get_identity_service)]
PaymentServiceDep = Annotated[PaymentService, Depends(get_payment_service)]
