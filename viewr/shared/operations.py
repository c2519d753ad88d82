"""
Catalogue des opérations (message patterns) échangées via RabbitMQ

Chaque valeur est la chaîne publiée dans le champ ``pattern`` d'une
enveloppe. La passerelle et les microservices importent les mêmes
constantes.
"""

from enum import Enum
from typing import List, Type


class Operation(str, Enum):
    """Base des catalogues d'opérations"""

    def __str__(self) -> str:
        return self.value


class LotOperation(Operation):
    """Lots d'inventaire dentaire"""
    CREATE = "lot.create"
    FIND_ALL = "lot.findAll"
    FIND_ONE = "lot.findOne"
    UPDATE = "lot.update"
    REMOVE = "lot.remove"
    FIND_BY_INVENTORY_ITEM = "lot.findByInventoryItem"
    FIND_BY_STATUS = "lot.findByStatus"
    FIND_BY_STORAGE_LOCATION = "lot.findByStorageLocation"
    FIND_BY_SUPPLIER = "lot.findBySupplier"


class SupplierOperation(Operation):
    """Fournisseurs"""
    CREATE = "supplier.create"
    FIND_ALL = "supplier.findAll"
    FIND_ONE = "supplier.findOne"
    UPDATE = "supplier.update"
    REMOVE = "supplier.remove"


class StorageLocationOperation(Operation):
    """Emplacements de stockage"""
    CREATE = "storageLocation.create"
    FIND_ALL = "storageLocation.findAll"
    FIND_ONE = "storageLocation.findOne"
    UPDATE = "storageLocation.update"
    DELETE = "storageLocation.delete"
    MERGE = "storageLocation.merge"


class InventoryItemOperation(Operation):
    """Articles d'inventaire"""
    CREATE = "inventoryItem.create"
    FIND_ALL = "inventoryItem.findAll"
    FIND_ONE = "inventoryItem.findOne"
    UPDATE = "inventoryItem.update"
    REMOVE = "inventoryItem.remove"
    FIND_BY_CATEGORY = "inventoryItem.findByCategory"
    FIND_CONSUMABLES = "inventoryItem.findConsumables"
    FIND_REUSABLES = "inventoryItem.findReusables"
    SEARCH_BY_NAME = "inventoryItem.searchByName"


class TransactionOperation(Operation):
    """Mouvements de stock"""
    CREATE = "transaction.create"
    FIND_ALL = "transaction.findAll"
    FIND_ONE = "transaction.findOne"
    UPDATE = "transaction.update"
    REMOVE = "transaction.remove"
    FIND_BY_TYPE = "transaction.findByType"
    FIND_BY_INVENTORY_ITEM = "transaction.findByInventoryItem"
    GET_TOTAL_QUANTITY = "transaction.getTotalQuantity"


class AppointmentOperation(Operation):
    """Rendez-vous dentaires"""
    CREATE = "appointment.create"
    FIND_ALL = "appointment.findAll"
    FIND_ONE = "appointment.findOne"
    UPDATE = "appointment.update"
    REMOVE = "appointment.remove"
    FIND_BY_PATIENT = "appointment.findByPatient"
    FIND_BY_DENTIST = "appointment.findByDentist"
    FIND_BY_STATUS = "appointment.findByStatus"
    FIND_BY_DATE_RANGE = "appointment.findByDateRange"
    COMPLETE = "appointment.complete"
    SEARCH = "appointment.search"


class PatientOperation(Operation):
    """Patients dentaires"""
    CREATE = "patient.create"
    FIND_ALL = "patient.findAll"
    FIND_ONE = "patient.findOne"
    UPDATE = "patient.update"
    REMOVE = "patient.remove"
    UPDATE_DENTAL_CHART = "patient.updateDentalChart"
    GET_DENTAL_CHART = "patient.getDentalChart"
    SEARCH = "patient.search"


class TaskOperation(Operation):
    """Tâches du cabinet"""
    CREATE = "task.create"
    FIND_ALL = "task.findAll"
    FIND_ONE = "task.findOne"
    UPDATE = "task.update"
    REMOVE = "task.remove"
    FIND_BY_USER = "task.findByUser"
    FIND_BY_STATUS = "task.findByStatus"
    COMPLETE = "task.complete"


class PlanOperation(Operation):
    """Plans d'abonnement (service Auth)"""
    CREATE = "plan.create"
    FIND_ALL = "plan.findAll"
    FIND_ONE = "plan.findOne"
    UPDATE = "plan.update"
    REMOVE = "plan.remove"


class NotificationOperation(Operation):
    """Notifications"""
    STORE = "notification.store"
    VERIFY_USER_ESTABLISHMENT = "notification.verify-user-establishment"


class HealthOperation(Operation):
    """Sonde de santé exposée par chaque microservice"""
    CHECK = "health.check"


DENTAL_OPERATIONS: List[Type[Operation]] = [
    LotOperation,
    SupplierOperation,
    StorageLocationOperation,
    InventoryItemOperation,
    TransactionOperation,
    AppointmentOperation,
    PatientOperation,
    TaskOperation,
    HealthOperation,
]

AUTH_OPERATIONS: List[Type[Operation]] = [PlanOperation, HealthOperation]

NOTIFICATION_OPERATIONS: List[Type[Operation]] = [NotificationOperation, HealthOperation]


def operation_values(catalogues: List[Type[Operation]]) -> List[str]:
    """Aplatir une liste de catalogues en chaînes de pattern"""
    return [op.value for catalogue in catalogues for op in catalogue]
