"""
Dépendances FastAPI de la passerelle
"""

from fastapi import Depends, Request

from ..shared.broker import RequestDispatcher
from ..shared.errors import GatewayError
from ..shared.utils import LoggerFactory

from .facades import (
    LotFacade, SupplierFacade, StorageLocationFacade, InventoryItemFacade, TransactionFacade,
    AppointmentFacade, PatientFacade, TaskFacade, PlanFacade, NotificationFacade
)


logger = LoggerFactory.get_logger("gateway.queue_header")


def resolve_target_queue(request: Request) -> str:
    """
    Lire la file cible depuis l'en-tête de la requête.

    Lève une erreur 400 avant toute interaction avec le broker si
    l'en-tête est absent, vide ou, quand une liste de files est
    configurée, hors de cette liste.
    """
    gateway_config = request.app.state.config.gateway
    header = gateway_config.target_queue_header
    target_queue = (request.headers.get(header) or "").strip()
    if not target_queue:
        logger.warning(f"En-tête {header} absent: {request.method} {request.url.path}")
        raise GatewayError(400, "Bad Request", f"Missing {header} header")

    if gateway_config.allowed_queues and target_queue not in gateway_config.allowed_queues:
        logger.warning(f"File cible refusée: {target_queue}")
        raise GatewayError(400, "Bad Request", f"Unknown target queue: {target_queue}")

    request.state.target_queue = target_queue
    return target_queue


def get_dispatcher(request: Request) -> RequestDispatcher:
    return request.app.state.dispatcher


def get_lot_facade(dispatcher: RequestDispatcher = Depends(get_dispatcher)) -> LotFacade:
    return LotFacade(dispatcher)


def get_supplier_facade(dispatcher: RequestDispatcher = Depends(get_dispatcher)) -> SupplierFacade:
    return SupplierFacade(dispatcher)


def get_storage_location_facade(dispatcher: RequestDispatcher = Depends(get_dispatcher)) -> StorageLocationFacade:
    return StorageLocationFacade(dispatcher)


def get_inventory_item_facade(dispatcher: RequestDispatcher = Depends(get_dispatcher)) -> InventoryItemFacade:
    return InventoryItemFacade(dispatcher)


def get_transaction_facade(dispatcher: RequestDispatcher = Depends(get_dispatcher)) -> TransactionFacade:
    return TransactionFacade(dispatcher)


def get_appointment_facade(dispatcher: RequestDispatcher = Depends(get_dispatcher)) -> AppointmentFacade:
    return AppointmentFacade(dispatcher)


def get_patient_facade(dispatcher: RequestDispatcher = Depends(get_dispatcher)) -> PatientFacade:
    return PatientFacade(dispatcher)


def get_task_facade(dispatcher: RequestDispatcher = Depends(get_dispatcher)) -> TaskFacade:
    return TaskFacade(dispatcher)


def get_plan_facade(dispatcher: RequestDispatcher = Depends(get_dispatcher)) -> PlanFacade:
    return PlanFacade(dispatcher)


def get_notification_facade(dispatcher: RequestDispatcher = Depends(get_dispatcher)) -> NotificationFacade:
    return NotificationFacade(dispatcher)
