"""
Façades de la passerelle : une par domaine

Chaque méthode correspond à une opération du catalogue. En cas de succès,
la réponse du microservice est renvoyée telle quelle ; en cas d'échec,
l'erreur d'envoi est convertie en ``GatewayError`` selon la politique
d'erreur nommée de l'opération.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..shared.broker import RequestDispatcher
from ..shared.errors import DispatchError, GatewayError
from ..shared.operations import (
    Operation, LotOperation, SupplierOperation, StorageLocationOperation, InventoryItemOperation,
    TransactionOperation, AppointmentOperation, PatientOperation, TaskOperation, PlanOperation,
    NotificationOperation
)
from ..shared.utils import LoggerFactory, redact_payload


@dataclass(frozen=True)
class ErrorPolicy:
    """Statut et titre appliqués quand le microservice n'a pas fourni de statut"""
    default_status: int
    error: str
    failure: str


def lookup(entity: str) -> ErrorPolicy:
    """Politique des lectures par identifiant : 404 par défaut"""
    return ErrorPolicy(404, f"{entity} Not Found", f"{entity} not found")


def failure(error: str, action: str) -> ErrorPolicy:
    """Politique par défaut : 500"""
    return ErrorPolicy(500, error, f"Failed to {action}")


def to_gateway_error(error: DispatchError, policy: ErrorPolicy) -> GatewayError:
    """Convertir une erreur d'envoi en enveloppe HTTP"""
    downstream_status = error.status_code
    if downstream_status is not None and 400 <= downstream_status <= 599:
        title = error.details.get("error") if isinstance(error.details.get("error"), str) else None
        return GatewayError(
            downstream_status,
            title or policy.error,
            error.message,
            original_error=redact_payload(error.details)
        )

    original = redact_payload(error.details) if error.details else {
        "kind": error.kind.value,
        "message": error.message
    }
    return GatewayError(
        policy.default_status,
        policy.error,
        f"{policy.failure}: {error.message}",
        original_error=original
    )


class GatewayFacade:
    """Base des façades : envoi et conversion d'erreur"""

    policies: Dict[Operation, ErrorPolicy] = {}

    def __init__(self, dispatcher: RequestDispatcher, timeout_ms: Optional[int] = None):
        self.dispatcher = dispatcher
        self.timeout_ms = timeout_ms
        self.logger = LoggerFactory.get_logger(f"gateway.{type(self).__name__}")

    def policy_for(self, operation: Operation) -> ErrorPolicy:
        return self.policies[operation]

    async def _call(self, route_key: str, operation: Operation, payload: Any = None) -> Any:
        policy = self.policy_for(operation)
        self.logger.info(f"Utilisation de la file: {route_key} pour {operation}")

        result = await self.dispatcher.send(route_key, operation, payload, timeout_ms=self.timeout_ms)
        if result.ok:
            return result.data

        gateway_error = to_gateway_error(result.error, policy)
        self.logger.error(
            f"{operation} en échec ({gateway_error.status_code}): {gateway_error.message}",
            extra={"queue": route_key, "kind": result.error.kind.value}
        )
        raise gateway_error

    @staticmethod
    def _by_id(entity_id: str) -> Dict[str, Any]:
        return {"id": entity_id}

    @staticmethod
    def _update(entity_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return {"id": entity_id, "data": data}


class LotFacade(GatewayFacade):
    """Lots d'inventaire dentaire"""

    policies = {
        LotOperation.CREATE: failure("Lot Creation Failed", "create lot"),
        LotOperation.FIND_ALL: failure("Lots Retrieval Failed", "retrieve lots"),
        LotOperation.FIND_ONE: lookup("Lot"),
        LotOperation.UPDATE: failure("Lot Update Failed", "update lot"),
        LotOperation.REMOVE: failure("Lot Deletion Failed", "delete lot"),
        LotOperation.FIND_BY_INVENTORY_ITEM: failure("Lots Retrieval Failed", "retrieve lots by inventory item"),
        LotOperation.FIND_BY_STATUS: failure("Lots Retrieval Failed", "retrieve lots by status"),
        LotOperation.FIND_BY_STORAGE_LOCATION: failure("Lots Retrieval Failed", "retrieve lots by storage location"),
        LotOperation.FIND_BY_SUPPLIER: failure("Lots Retrieval Failed", "retrieve lots by supplier"),
    }

    async def create_lot(self, route_key: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, LotOperation.CREATE, data)

    async def get_all_lots(self, route_key: str) -> Any:
        return await self._call(route_key, LotOperation.FIND_ALL, {})

    async def get_lot_by_id(self, route_key: str, lot_id: str) -> Any:
        return await self._call(route_key, LotOperation.FIND_ONE, self._by_id(lot_id))

    async def update_lot(self, route_key: str, lot_id: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, LotOperation.UPDATE, self._update(lot_id, data))

    async def delete_lot(self, route_key: str, lot_id: str) -> Any:
        return await self._call(route_key, LotOperation.REMOVE, self._by_id(lot_id))

    async def get_lots_by_inventory_item(self, route_key: str, inventory_item_id: str) -> Any:
        return await self._call(route_key, LotOperation.FIND_BY_INVENTORY_ITEM, {"inventoryItemId": inventory_item_id})

    async def get_lots_by_status(self, route_key: str, status: str) -> Any:
        return await self._call(route_key, LotOperation.FIND_BY_STATUS, {"status": status})

    async def get_lots_by_storage_location(self, route_key: str, storage_location_id: str) -> Any:
        return await self._call(
            route_key, LotOperation.FIND_BY_STORAGE_LOCATION, {"storageLocationId": storage_location_id}
        )

    async def get_lots_by_supplier(self, route_key: str, supplier_id: str) -> Any:
        return await self._call(route_key, LotOperation.FIND_BY_SUPPLIER, {"supplierId": supplier_id})


class SupplierFacade(GatewayFacade):
    """Fournisseurs"""

    policies = {
        SupplierOperation.CREATE: failure("Supplier Creation Failed", "create supplier"),
        SupplierOperation.FIND_ALL: failure("Suppliers Retrieval Failed", "retrieve suppliers"),
        SupplierOperation.FIND_ONE: lookup("Supplier"),
        SupplierOperation.UPDATE: failure("Supplier Update Failed", "update supplier"),
        SupplierOperation.REMOVE: failure("Supplier Deletion Failed", "delete supplier"),
    }

    async def create_supplier(self, route_key: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, SupplierOperation.CREATE, data)

    async def get_all_suppliers(self, route_key: str) -> Any:
        return await self._call(route_key, SupplierOperation.FIND_ALL, {})

    async def get_supplier_by_id(self, route_key: str, supplier_id: str) -> Any:
        return await self._call(route_key, SupplierOperation.FIND_ONE, self._by_id(supplier_id))

    async def update_supplier(self, route_key: str, supplier_id: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, SupplierOperation.UPDATE, self._update(supplier_id, data))

    async def delete_supplier(self, route_key: str, supplier_id: str) -> Any:
        return await self._call(route_key, SupplierOperation.REMOVE, self._by_id(supplier_id))


class StorageLocationFacade(GatewayFacade):
    """Emplacements de stockage"""

    policies = {
        StorageLocationOperation.CREATE: failure("Storage Location Creation Failed", "create storage location"),
        StorageLocationOperation.FIND_ALL: failure("Storage Locations Retrieval Failed", "retrieve storage locations"),
        StorageLocationOperation.FIND_ONE: lookup("Storage Location"),
        StorageLocationOperation.UPDATE: failure("Storage Location Update Failed", "update storage location"),
        StorageLocationOperation.DELETE: failure("Storage Location Deletion Failed", "delete storage location"),
        StorageLocationOperation.MERGE: failure("Storage Location Merge Failed", "merge storage locations"),
    }

    async def create_storage_location(self, route_key: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, StorageLocationOperation.CREATE, data)

    async def get_all_storage_locations(self, route_key: str) -> Any:
        return await self._call(route_key, StorageLocationOperation.FIND_ALL, {})

    async def get_storage_location_by_id(self, route_key: str, location_id: str) -> Any:
        return await self._call(route_key, StorageLocationOperation.FIND_ONE, self._by_id(location_id))

    async def update_storage_location(self, route_key: str, location_id: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, StorageLocationOperation.UPDATE, self._update(location_id, data))

    async def delete_storage_location(self, route_key: str, location_id: str) -> Any:
        return await self._call(route_key, StorageLocationOperation.DELETE, self._by_id(location_id))

    async def merge_storage_locations(self, route_key: str, source_id: str, target_id: str) -> Any:
        return await self._call(
            route_key, StorageLocationOperation.MERGE, {"sourceId": source_id, "targetId": target_id}
        )


class InventoryItemFacade(GatewayFacade):
    """Articles d'inventaire"""

    policies = {
        InventoryItemOperation.CREATE: failure("Inventory Item Creation Failed", "create inventory item"),
        InventoryItemOperation.FIND_ALL: failure("Inventory Items Retrieval Failed", "retrieve inventory items"),
        InventoryItemOperation.FIND_ONE: lookup("Inventory Item"),
        InventoryItemOperation.UPDATE: failure("Inventory Item Update Failed", "update inventory item"),
        InventoryItemOperation.REMOVE: failure("Inventory Item Deletion Failed", "delete inventory item"),
        InventoryItemOperation.FIND_BY_CATEGORY: failure(
            "Inventory Items Retrieval Failed", "retrieve inventory items by category"
        ),
        InventoryItemOperation.FIND_CONSUMABLES: failure("Inventory Items Retrieval Failed", "retrieve consumables"),
        InventoryItemOperation.FIND_REUSABLES: failure("Inventory Items Retrieval Failed", "retrieve reusables"),
        InventoryItemOperation.SEARCH_BY_NAME: failure("Inventory Item Search Failed", "search inventory items"),
    }

    async def create_inventory_item(self, route_key: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, InventoryItemOperation.CREATE, data)

    async def get_all_inventory_items(self, route_key: str) -> Any:
        return await self._call(route_key, InventoryItemOperation.FIND_ALL, {})

    async def get_inventory_item_by_id(self, route_key: str, item_id: str) -> Any:
        return await self._call(route_key, InventoryItemOperation.FIND_ONE, self._by_id(item_id))

    async def update_inventory_item(self, route_key: str, item_id: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, InventoryItemOperation.UPDATE, self._update(item_id, data))

    async def delete_inventory_item(self, route_key: str, item_id: str) -> Any:
        return await self._call(route_key, InventoryItemOperation.REMOVE, self._by_id(item_id))

    async def get_inventory_items_by_category(self, route_key: str, category: str) -> Any:
        return await self._call(route_key, InventoryItemOperation.FIND_BY_CATEGORY, {"category": category})

    async def get_consumables(self, route_key: str) -> Any:
        return await self._call(route_key, InventoryItemOperation.FIND_CONSUMABLES, {})

    async def get_reusables(self, route_key: str) -> Any:
        return await self._call(route_key, InventoryItemOperation.FIND_REUSABLES, {})

    async def search_inventory_items(self, route_key: str, search_term: str) -> Any:
        return await self._call(route_key, InventoryItemOperation.SEARCH_BY_NAME, {"searchTerm": search_term})


class TransactionFacade(GatewayFacade):
    """Mouvements de stock"""

    policies = {
        TransactionOperation.CREATE: failure("Transaction Creation Failed", "create transaction"),
        TransactionOperation.FIND_ALL: failure("Transactions Retrieval Failed", "retrieve transactions"),
        TransactionOperation.FIND_ONE: lookup("Transaction"),
        TransactionOperation.UPDATE: failure("Transaction Update Failed", "update transaction"),
        TransactionOperation.REMOVE: failure("Transaction Deletion Failed", "delete transaction"),
        TransactionOperation.FIND_BY_TYPE: failure("Transactions Retrieval Failed", "retrieve transactions by type"),
        TransactionOperation.FIND_BY_INVENTORY_ITEM: failure(
            "Transactions Retrieval Failed", "retrieve transactions by inventory item"
        ),
        TransactionOperation.GET_TOTAL_QUANTITY: failure("Total Quantity Retrieval Failed", "compute total quantity"),
    }

    async def create_transaction(self, route_key: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, TransactionOperation.CREATE, data)

    async def get_all_transactions(self, route_key: str) -> Any:
        return await self._call(route_key, TransactionOperation.FIND_ALL, {})

    async def get_transaction_by_id(self, route_key: str, transaction_id: str) -> Any:
        return await self._call(route_key, TransactionOperation.FIND_ONE, self._by_id(transaction_id))

    async def update_transaction(self, route_key: str, transaction_id: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, TransactionOperation.UPDATE, self._update(transaction_id, data))

    async def delete_transaction(self, route_key: str, transaction_id: str) -> Any:
        return await self._call(route_key, TransactionOperation.REMOVE, self._by_id(transaction_id))

    async def get_transactions_by_type(self, route_key: str, transaction_type: str) -> Any:
        return await self._call(route_key, TransactionOperation.FIND_BY_TYPE, {"type": transaction_type})

    async def get_transactions_by_inventory_item(self, route_key: str, inventory_item_id: str) -> Any:
        return await self._call(
            route_key, TransactionOperation.FIND_BY_INVENTORY_ITEM, {"inventoryItemId": inventory_item_id}
        )

    async def get_total_quantity(self, route_key: str, inventory_item_id: str) -> Any:
        return await self._call(
            route_key, TransactionOperation.GET_TOTAL_QUANTITY, {"inventoryItemId": inventory_item_id}
        )


class AppointmentFacade(GatewayFacade):
    """Rendez-vous dentaires"""

    policies = {
        AppointmentOperation.CREATE: failure("Appointment Creation Failed", "create appointment"),
        AppointmentOperation.FIND_ALL: failure("Appointments Retrieval Failed", "retrieve appointments"),
        AppointmentOperation.FIND_ONE: lookup("Appointment"),
        AppointmentOperation.UPDATE: failure("Appointment Update Failed", "update appointment"),
        AppointmentOperation.REMOVE: failure("Appointment Deletion Failed", "delete appointment"),
        AppointmentOperation.FIND_BY_PATIENT: failure("Appointments Retrieval Failed", "retrieve patient appointments"),
        AppointmentOperation.FIND_BY_DENTIST: failure("Appointments Retrieval Failed", "retrieve dentist appointments"),
        AppointmentOperation.FIND_BY_STATUS: failure("Appointments Retrieval Failed", "retrieve appointments by status"),
        AppointmentOperation.FIND_BY_DATE_RANGE: failure(
            "Appointments Retrieval Failed", "retrieve appointments by date range"
        ),
        AppointmentOperation.COMPLETE: failure("Appointment Completion Failed", "complete appointment"),
        AppointmentOperation.SEARCH: failure("Appointment Search Failed", "search appointments"),
    }

    async def create_appointment(self, route_key: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, AppointmentOperation.CREATE, data)

    async def get_all_appointments(self, route_key: str) -> Any:
        return await self._call(route_key, AppointmentOperation.FIND_ALL, {})

    async def get_appointment_by_id(self, route_key: str, appointment_id: str) -> Any:
        return await self._call(route_key, AppointmentOperation.FIND_ONE, self._by_id(appointment_id))

    async def update_appointment(self, route_key: str, appointment_id: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, AppointmentOperation.UPDATE, self._update(appointment_id, data))

    async def delete_appointment(self, route_key: str, appointment_id: str) -> Any:
        return await self._call(route_key, AppointmentOperation.REMOVE, self._by_id(appointment_id))

    async def get_appointments_by_patient(self, route_key: str, patient_id: str) -> Any:
        return await self._call(route_key, AppointmentOperation.FIND_BY_PATIENT, {"patientId": patient_id})

    async def get_appointments_by_dentist(self, route_key: str, dentist_id: str) -> Any:
        return await self._call(route_key, AppointmentOperation.FIND_BY_DENTIST, {"dentistId": dentist_id})

    async def get_appointments_by_status(self, route_key: str, status: str) -> Any:
        return await self._call(route_key, AppointmentOperation.FIND_BY_STATUS, {"status": status})

    async def get_appointments_by_date_range(self, route_key: str, window: Dict[str, Any]) -> Any:
        return await self._call(route_key, AppointmentOperation.FIND_BY_DATE_RANGE, window)

    async def complete_appointment(self, route_key: str, appointment_id: str) -> Any:
        return await self._call(route_key, AppointmentOperation.COMPLETE, self._by_id(appointment_id))

    async def search_appointments(self, route_key: str, criteria: Dict[str, Any]) -> Any:
        return await self._call(route_key, AppointmentOperation.SEARCH, criteria)


class PatientFacade(GatewayFacade):
    """Patients dentaires"""

    policies = {
        PatientOperation.CREATE: failure("Patient Creation Failed", "create patient"),
        PatientOperation.FIND_ALL: failure("Patients Retrieval Failed", "retrieve patients"),
        PatientOperation.FIND_ONE: lookup("Patient"),
        PatientOperation.UPDATE: failure("Patient Update Failed", "update patient"),
        PatientOperation.REMOVE: failure("Patient Deletion Failed", "delete patient"),
        PatientOperation.UPDATE_DENTAL_CHART: failure("Dental Chart Update Failed", "update dental chart"),
        PatientOperation.GET_DENTAL_CHART: lookup("Dental Chart"),
        PatientOperation.SEARCH: failure("Patient Search Failed", "search patients"),
    }

    async def create_patient(self, route_key: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, PatientOperation.CREATE, data)

    async def get_all_patients(self, route_key: str) -> Any:
        return await self._call(route_key, PatientOperation.FIND_ALL, {})

    async def get_patient_by_id(self, route_key: str, patient_id: str) -> Any:
        return await self._call(route_key, PatientOperation.FIND_ONE, self._by_id(patient_id))

    async def update_patient(self, route_key: str, patient_id: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, PatientOperation.UPDATE, self._update(patient_id, data))

    async def delete_patient(self, route_key: str, patient_id: str) -> Any:
        return await self._call(route_key, PatientOperation.REMOVE, self._by_id(patient_id))

    async def update_dental_chart(self, route_key: str, patient_id: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, PatientOperation.UPDATE_DENTAL_CHART, self._update(patient_id, data))

    async def get_dental_chart(self, route_key: str, patient_id: str) -> Any:
        return await self._call(route_key, PatientOperation.GET_DENTAL_CHART, self._by_id(patient_id))

    async def search_patients(self, route_key: str, criteria: Dict[str, Any]) -> Any:
        return await self._call(route_key, PatientOperation.SEARCH, criteria)


class TaskFacade(GatewayFacade):
    """Tâches du cabinet"""

    policies = {
        TaskOperation.CREATE: failure("Task Creation Failed", "create task"),
        TaskOperation.FIND_ALL: failure("Tasks Retrieval Failed", "retrieve tasks"),
        TaskOperation.FIND_ONE: lookup("Task"),
        TaskOperation.UPDATE: failure("Task Update Failed", "update task"),
        TaskOperation.REMOVE: failure("Task Deletion Failed", "delete task"),
        TaskOperation.FIND_BY_USER: failure("Tasks Retrieval Failed", "retrieve user tasks"),
        TaskOperation.FIND_BY_STATUS: failure("Tasks Retrieval Failed", "retrieve tasks by status"),
        TaskOperation.COMPLETE: failure("Task Completion Failed", "complete task"),
    }

    async def create_task(self, route_key: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, TaskOperation.CREATE, data)

    async def get_all_tasks(self, route_key: str) -> Any:
        return await self._call(route_key, TaskOperation.FIND_ALL, {})

    async def get_task_by_id(self, route_key: str, task_id: str) -> Any:
        return await self._call(route_key, TaskOperation.FIND_ONE, self._by_id(task_id))

    async def update_task(self, route_key: str, task_id: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, TaskOperation.UPDATE, self._update(task_id, data))

    async def delete_task(self, route_key: str, task_id: str) -> Any:
        return await self._call(route_key, TaskOperation.REMOVE, self._by_id(task_id))

    async def get_tasks_by_user(self, route_key: str, user_id: str) -> Any:
        return await self._call(route_key, TaskOperation.FIND_BY_USER, {"userId": user_id})

    async def get_tasks_by_status(self, route_key: str, status: str) -> Any:
        return await self._call(route_key, TaskOperation.FIND_BY_STATUS, {"status": status})

    async def complete_task(self, route_key: str, task_id: str) -> Any:
        return await self._call(route_key, TaskOperation.COMPLETE, self._by_id(task_id))


class PlanFacade(GatewayFacade):
    """Plans d'abonnement"""

    policies = {
        PlanOperation.CREATE: failure("Plan Creation Failed", "create plan"),
        PlanOperation.FIND_ALL: failure("Plans Retrieval Failed", "retrieve plans"),
        PlanOperation.FIND_ONE: lookup("Plan"),
        PlanOperation.UPDATE: failure("Plan Update Failed", "update plan"),
        PlanOperation.REMOVE: failure("Plan Deletion Failed", "delete plan"),
    }

    async def create_plan(self, route_key: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, PlanOperation.CREATE, data)

    async def get_all_plans(self, route_key: str) -> Any:
        return await self._call(route_key, PlanOperation.FIND_ALL, {})

    async def get_plan_by_id(self, route_key: str, plan_id: str) -> Any:
        return await self._call(route_key, PlanOperation.FIND_ONE, self._by_id(plan_id))

    async def update_plan(self, route_key: str, plan_id: str, data: Dict[str, Any]) -> Any:
        return await self._call(route_key, PlanOperation.UPDATE, self._update(plan_id, data))

    async def delete_plan(self, route_key: str, plan_id: str) -> Any:
        return await self._call(route_key, PlanOperation.REMOVE, self._by_id(plan_id))


class NotificationFacade(GatewayFacade):
    """Notifications : publication sans attente de réponse, vérification en requête-réponse"""

    policies = {
        NotificationOperation.STORE: failure("Notification Dispatch Failed", "send notification"),
        NotificationOperation.VERIFY_USER_ESTABLISHMENT: failure(
            "User Establishment Verification Failed", "verify user establishment"
        ),
    }

    async def send_notification(self, route_key: str, data: Dict[str, Any]) -> Dict[str, Any]:
        operation = NotificationOperation.STORE
        try:
            await self.dispatcher.send_no_reply(route_key, operation, data)
        except DispatchError as e:
            gateway_error = to_gateway_error(e, self.policy_for(operation))
            self.logger.error(f"{operation} en échec: {gateway_error.message}", extra={"queue": route_key})
            raise gateway_error from e
        return {"accepted": True, "queue": route_key}

    async def verify_user_establishment(self, route_key: str, user_id: str, establishment_id: str) -> Any:
        return await self._call(
            route_key,
            NotificationOperation.VERIFY_USER_ESTABLISHMENT,
            {"userId": user_id, "establishmentId": establishment_id}
        )
