"""
Routes FastAPI de la passerelle

Toutes les routes métier dépendent de ``resolve_target_queue`` : la file
cible vient de l'en-tête de la requête, jamais de la route.
"""

from datetime import date, datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import ValidationError

from ..shared.dto import (
    LotCreate, LotUpdate, LotStatus,
    SupplierCreate, SupplierUpdate,
    StorageLocationCreate, StorageLocationUpdate, StorageLocationMerge,
    InventoryItemCreate, InventoryItemUpdate, InventoryItemCategory,
    TransactionCreate, TransactionUpdate, TransactionType,
    AppointmentCreate, AppointmentUpdate, AppointmentStatus, AppointmentSearch, DateRange,
    PatientCreate, PatientUpdate, PatientSearch, DentalChartUpdate,
    TaskCreate, TaskUpdate, TaskStatus,
    PlanCreate, PlanUpdate,
    NotificationCreate, UserEstablishmentCheck
)
from ..shared.errors import GatewayError

from .dependencies import (
    resolve_target_queue,
    get_lot_facade, get_supplier_facade, get_storage_location_facade,
    get_inventory_item_facade, get_transaction_facade, get_appointment_facade,
    get_patient_facade, get_task_facade, get_plan_facade, get_notification_facade
)
from .facades import (
    LotFacade, SupplierFacade, StorageLocationFacade, InventoryItemFacade, TransactionFacade,
    AppointmentFacade, PatientFacade, TaskFacade, PlanFacade, NotificationFacade
)


lot_router = APIRouter(prefix="/dentist/inventory/lots", tags=["Dental Inventory Lots"])
supplier_router = APIRouter(prefix="/dentist/inventory/suppliers", tags=["Dental Inventory Suppliers"])
storage_location_router = APIRouter(
    prefix="/dentist/inventory/storage-locations", tags=["Dental Inventory Storage Locations"]
)
inventory_item_router = APIRouter(prefix="/dentist/inventory/items", tags=["Dental Inventory Items"])
transaction_router = APIRouter(prefix="/dentist/inventory/transactions", tags=["Dental Inventory Transactions"])
appointment_router = APIRouter(prefix="/dentist/appointments", tags=["Dental Appointments"])
patient_router = APIRouter(prefix="/dentist/patients", tags=["Dental Patients"])
task_router = APIRouter(prefix="/dentist/tasks", tags=["Dental Tasks"])
plan_router = APIRouter(prefix="/plans", tags=["Plans"])
notification_router = APIRouter(prefix="/notifications", tags=["Notifications"])


def build_query(model, **values):
    """Construire un DTO depuis des paramètres de requête, erreurs en 400"""
    try:
        return model(**values)
    except ValidationError as e:
        message = "; ".join(error["msg"] for error in e.errors())
        raise GatewayError(400, "Bad Request", message) from e


# === LOTS ===

@lot_router.post("", status_code=status.HTTP_201_CREATED)
async def create_lot(
    body: LotCreate,
    queue: str = Depends(resolve_target_queue),
    facade: LotFacade = Depends(get_lot_facade)
) -> Any:
    return await facade.create_lot(queue, body.to_payload())


@lot_router.get("")
async def get_all_lots(
    queue: str = Depends(resolve_target_queue),
    facade: LotFacade = Depends(get_lot_facade)
) -> Any:
    return await facade.get_all_lots(queue)


@lot_router.get("/inventory-item/{inventory_item_id}")
async def get_lots_by_inventory_item(
    inventory_item_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: LotFacade = Depends(get_lot_facade)
) -> Any:
    return await facade.get_lots_by_inventory_item(queue, inventory_item_id)


@lot_router.get("/status/{lot_status}")
async def get_lots_by_status(
    lot_status: LotStatus,
    queue: str = Depends(resolve_target_queue),
    facade: LotFacade = Depends(get_lot_facade)
) -> Any:
    return await facade.get_lots_by_status(queue, lot_status.value)


@lot_router.get("/storage-location/{storage_location_id}")
async def get_lots_by_storage_location(
    storage_location_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: LotFacade = Depends(get_lot_facade)
) -> Any:
    return await facade.get_lots_by_storage_location(queue, storage_location_id)


@lot_router.get("/supplier/{supplier_id}")
async def get_lots_by_supplier(
    supplier_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: LotFacade = Depends(get_lot_facade)
) -> Any:
    return await facade.get_lots_by_supplier(queue, supplier_id)


@lot_router.get("/{lot_id}")
async def get_lot_by_id(
    lot_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: LotFacade = Depends(get_lot_facade)
) -> Any:
    return await facade.get_lot_by_id(queue, lot_id)


@lot_router.put("/{lot_id}")
async def update_lot(
    lot_id: str,
    body: LotUpdate,
    queue: str = Depends(resolve_target_queue),
    facade: LotFacade = Depends(get_lot_facade)
) -> Any:
    return await facade.update_lot(queue, lot_id, body.to_payload(exclude_unset=True))


@lot_router.delete("/{lot_id}")
async def delete_lot(
    lot_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: LotFacade = Depends(get_lot_facade)
) -> Any:
    return await facade.delete_lot(queue, lot_id)


# === FOURNISSEURS ===

@supplier_router.post("", status_code=status.HTTP_201_CREATED)
async def create_supplier(
    body: SupplierCreate,
    queue: str = Depends(resolve_target_queue),
    facade: SupplierFacade = Depends(get_supplier_facade)
) -> Any:
    return await facade.create_supplier(queue, body.to_payload())


@supplier_router.get("")
async def get_all_suppliers(
    queue: str = Depends(resolve_target_queue),
    facade: SupplierFacade = Depends(get_supplier_facade)
) -> Any:
    return await facade.get_all_suppliers(queue)


@supplier_router.get("/{supplier_id}")
async def get_supplier_by_id(
    supplier_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: SupplierFacade = Depends(get_supplier_facade)
) -> Any:
    return await facade.get_supplier_by_id(queue, supplier_id)


@supplier_router.put("/{supplier_id}")
async def update_supplier(
    supplier_id: str,
    body: SupplierUpdate,
    queue: str = Depends(resolve_target_queue),
    facade: SupplierFacade = Depends(get_supplier_facade)
) -> Any:
    return await facade.update_supplier(queue, supplier_id, body.to_payload(exclude_unset=True))


@supplier_router.delete("/{supplier_id}")
async def delete_supplier(
    supplier_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: SupplierFacade = Depends(get_supplier_facade)
) -> Any:
    return await facade.delete_supplier(queue, supplier_id)


# === EMPLACEMENTS ===

@storage_location_router.post("", status_code=status.HTTP_201_CREATED)
async def create_storage_location(
    body: StorageLocationCreate,
    queue: str = Depends(resolve_target_queue),
    facade: StorageLocationFacade = Depends(get_storage_location_facade)
) -> Any:
    return await facade.create_storage_location(queue, body.to_payload())


@storage_location_router.get("")
async def get_all_storage_locations(
    queue: str = Depends(resolve_target_queue),
    facade: StorageLocationFacade = Depends(get_storage_location_facade)
) -> Any:
    return await facade.get_all_storage_locations(queue)


@storage_location_router.post("/merge")
async def merge_storage_locations(
    body: StorageLocationMerge,
    queue: str = Depends(resolve_target_queue),
    facade: StorageLocationFacade = Depends(get_storage_location_facade)
) -> Any:
    return await facade.merge_storage_locations(queue, body.source_id, body.target_id)


@storage_location_router.get("/{location_id}")
async def get_storage_location_by_id(
    location_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: StorageLocationFacade = Depends(get_storage_location_facade)
) -> Any:
    return await facade.get_storage_location_by_id(queue, location_id)


@storage_location_router.put("/{location_id}")
async def update_storage_location(
    location_id: str,
    body: StorageLocationUpdate,
    queue: str = Depends(resolve_target_queue),
    facade: StorageLocationFacade = Depends(get_storage_location_facade)
) -> Any:
    return await facade.update_storage_location(queue, location_id, body.to_payload(exclude_unset=True))


@storage_location_router.delete("/{location_id}")
async def delete_storage_location(
    location_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: StorageLocationFacade = Depends(get_storage_location_facade)
) -> Any:
    return await facade.delete_storage_location(queue, location_id)


# === ARTICLES ===

@inventory_item_router.post("", status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    body: InventoryItemCreate,
    queue: str = Depends(resolve_target_queue),
    facade: InventoryItemFacade = Depends(get_inventory_item_facade)
) -> Any:
    return await facade.create_inventory_item(queue, body.to_payload())


@inventory_item_router.get("")
async def get_all_inventory_items(
    queue: str = Depends(resolve_target_queue),
    facade: InventoryItemFacade = Depends(get_inventory_item_facade)
) -> Any:
    return await facade.get_all_inventory_items(queue)


@inventory_item_router.get("/search")
async def search_inventory_items(
    search_term: str = Query(..., alias="searchTerm", min_length=1),
    queue: str = Depends(resolve_target_queue),
    facade: InventoryItemFacade = Depends(get_inventory_item_facade)
) -> Any:
    return await facade.search_inventory_items(queue, search_term)


@inventory_item_router.get("/types/consumables")
async def get_consumables(
    queue: str = Depends(resolve_target_queue),
    facade: InventoryItemFacade = Depends(get_inventory_item_facade)
) -> Any:
    return await facade.get_consumables(queue)


@inventory_item_router.get("/types/reusables")
async def get_reusables(
    queue: str = Depends(resolve_target_queue),
    facade: InventoryItemFacade = Depends(get_inventory_item_facade)
) -> Any:
    return await facade.get_reusables(queue)


@inventory_item_router.get("/category/{category}")
async def get_inventory_items_by_category(
    category: InventoryItemCategory,
    queue: str = Depends(resolve_target_queue),
    facade: InventoryItemFacade = Depends(get_inventory_item_facade)
) -> Any:
    return await facade.get_inventory_items_by_category(queue, category.value)


@inventory_item_router.get("/{item_id}")
async def get_inventory_item_by_id(
    item_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: InventoryItemFacade = Depends(get_inventory_item_facade)
) -> Any:
    return await facade.get_inventory_item_by_id(queue, item_id)


@inventory_item_router.put("/{item_id}")
async def update_inventory_item(
    item_id: str,
    body: InventoryItemUpdate,
    queue: str = Depends(resolve_target_queue),
    facade: InventoryItemFacade = Depends(get_inventory_item_facade)
) -> Any:
    return await facade.update_inventory_item(queue, item_id, body.to_payload(exclude_unset=True))


@inventory_item_router.delete("/{item_id}")
async def delete_inventory_item(
    item_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: InventoryItemFacade = Depends(get_inventory_item_facade)
) -> Any:
    return await facade.delete_inventory_item(queue, item_id)


# === MOUVEMENTS ===

@transaction_router.post("", status_code=status.HTTP_201_CREATED)
async def create_transaction(
    body: TransactionCreate,
    queue: str = Depends(resolve_target_queue),
    facade: TransactionFacade = Depends(get_transaction_facade)
) -> Any:
    return await facade.create_transaction(queue, body.to_payload())


@transaction_router.get("")
async def get_transactions(
    transaction_type: Optional[TransactionType] = Query(None, alias="type"),
    inventory_item_id: Optional[str] = Query(None, alias="inventoryItemId"),
    queue: str = Depends(resolve_target_queue),
    facade: TransactionFacade = Depends(get_transaction_facade)
) -> Any:
    """Le filtre par type l'emporte sur le filtre par article"""
    if transaction_type is not None:
        return await facade.get_transactions_by_type(queue, transaction_type.value)
    if inventory_item_id:
        return await facade.get_transactions_by_inventory_item(queue, inventory_item_id)
    return await facade.get_all_transactions(queue)


@transaction_router.get("/{inventory_item_id}/total-quantity")
async def get_total_quantity(
    inventory_item_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: TransactionFacade = Depends(get_transaction_facade)
) -> Any:
    return await facade.get_total_quantity(queue, inventory_item_id)


@transaction_router.get("/{transaction_id}")
async def get_transaction_by_id(
    transaction_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: TransactionFacade = Depends(get_transaction_facade)
) -> Any:
    return await facade.get_transaction_by_id(queue, transaction_id)


@transaction_router.patch("/{transaction_id}")
async def update_transaction(
    transaction_id: str,
    body: TransactionUpdate,
    queue: str = Depends(resolve_target_queue),
    facade: TransactionFacade = Depends(get_transaction_facade)
) -> Any:
    return await facade.update_transaction(queue, transaction_id, body.to_payload(exclude_unset=True))


@transaction_router.delete("/{transaction_id}")
async def delete_transaction(
    transaction_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: TransactionFacade = Depends(get_transaction_facade)
) -> Any:
    return await facade.delete_transaction(queue, transaction_id)


# === RENDEZ-VOUS ===

@appointment_router.post("", status_code=status.HTTP_201_CREATED)
async def create_appointment(
    body: AppointmentCreate,
    queue: str = Depends(resolve_target_queue),
    facade: AppointmentFacade = Depends(get_appointment_facade)
) -> Any:
    return await facade.create_appointment(queue, body.to_payload())


@appointment_router.get("")
async def get_all_appointments(
    queue: str = Depends(resolve_target_queue),
    facade: AppointmentFacade = Depends(get_appointment_facade)
) -> Any:
    return await facade.get_all_appointments(queue)


@appointment_router.get("/date-range")
async def get_appointments_by_date_range(
    start_date: datetime = Query(..., alias="startDate"),
    end_date: datetime = Query(..., alias="endDate"),
    queue: str = Depends(resolve_target_queue),
    facade: AppointmentFacade = Depends(get_appointment_facade)
) -> Any:
    window = build_query(DateRange, start_date=start_date, end_date=end_date)
    return await facade.get_appointments_by_date_range(queue, window.to_payload())


@appointment_router.get("/search")
async def search_appointments(
    patient_id: Optional[str] = Query(None, alias="patientId"),
    dentist_id: Optional[str] = Query(None, alias="dentistId"),
    appointment_type: Optional[str] = Query(None, alias="appointmentType"),
    appointment_status: Optional[AppointmentStatus] = Query(None, alias="status"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    queue: str = Depends(resolve_target_queue),
    facade: AppointmentFacade = Depends(get_appointment_facade)
) -> Any:
    criteria = build_query(
        AppointmentSearch,
        patient_id=patient_id,
        dentist_id=dentist_id,
        appointment_type=appointment_type,
        status=appointment_status,
        start_date=start_date,
        end_date=end_date
    )
    return await facade.search_appointments(queue, criteria.to_payload())


@appointment_router.get("/patient/{patient_id}")
async def get_appointments_by_patient(
    patient_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: AppointmentFacade = Depends(get_appointment_facade)
) -> Any:
    return await facade.get_appointments_by_patient(queue, patient_id)


@appointment_router.get("/dentist/{dentist_id}")
async def get_appointments_by_dentist(
    dentist_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: AppointmentFacade = Depends(get_appointment_facade)
) -> Any:
    return await facade.get_appointments_by_dentist(queue, dentist_id)


@appointment_router.get("/status/{appointment_status}")
async def get_appointments_by_status(
    appointment_status: AppointmentStatus,
    queue: str = Depends(resolve_target_queue),
    facade: AppointmentFacade = Depends(get_appointment_facade)
) -> Any:
    return await facade.get_appointments_by_status(queue, appointment_status.value)


@appointment_router.get("/{appointment_id}")
async def get_appointment_by_id(
    appointment_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: AppointmentFacade = Depends(get_appointment_facade)
) -> Any:
    return await facade.get_appointment_by_id(queue, appointment_id)


@appointment_router.put("/{appointment_id}")
async def update_appointment(
    appointment_id: str,
    body: AppointmentUpdate,
    queue: str = Depends(resolve_target_queue),
    facade: AppointmentFacade = Depends(get_appointment_facade)
) -> Any:
    return await facade.update_appointment(queue, appointment_id, body.to_payload(exclude_unset=True))


@appointment_router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: AppointmentFacade = Depends(get_appointment_facade)
) -> Any:
    return await facade.delete_appointment(queue, appointment_id)


@appointment_router.post("/{appointment_id}/complete")
async def complete_appointment(
    appointment_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: AppointmentFacade = Depends(get_appointment_facade)
) -> Any:
    return await facade.complete_appointment(queue, appointment_id)


# === PATIENTS ===

@patient_router.post("", status_code=status.HTTP_201_CREATED)
async def create_patient(
    body: PatientCreate,
    queue: str = Depends(resolve_target_queue),
    facade: PatientFacade = Depends(get_patient_facade)
) -> Any:
    return await facade.create_patient(queue, body.to_payload())


@patient_router.get("")
async def get_all_patients(
    queue: str = Depends(resolve_target_queue),
    facade: PatientFacade = Depends(get_patient_facade)
) -> Any:
    return await facade.get_all_patients(queue)


@patient_router.get("/search")
async def search_patients(
    first_name: Optional[str] = Query(None, alias="firstName"),
    last_name: Optional[str] = Query(None, alias="lastName"),
    cin: Optional[str] = None,
    phone_number: Optional[str] = Query(None, alias="phoneNumber"),
    email: Optional[str] = None,
    date_of_birth_from: Optional[date] = Query(None, alias="dateOfBirthFrom"),
    date_of_birth_to: Optional[date] = Query(None, alias="dateOfBirthTo"),
    queue: str = Depends(resolve_target_queue),
    facade: PatientFacade = Depends(get_patient_facade)
) -> Any:
    criteria = build_query(
        PatientSearch,
        first_name=first_name,
        last_name=last_name,
        cin=cin,
        phone_number=phone_number,
        email=email,
        date_of_birth_from=date_of_birth_from,
        date_of_birth_to=date_of_birth_to
    )
    return await facade.search_patients(queue, criteria.to_payload())


@patient_router.get("/{patient_id}")
async def get_patient_by_id(
    patient_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: PatientFacade = Depends(get_patient_facade)
) -> Any:
    return await facade.get_patient_by_id(queue, patient_id)


@patient_router.put("/{patient_id}")
async def update_patient(
    patient_id: str,
    body: PatientUpdate,
    queue: str = Depends(resolve_target_queue),
    facade: PatientFacade = Depends(get_patient_facade)
) -> Any:
    return await facade.update_patient(queue, patient_id, body.to_payload(exclude_unset=True))


@patient_router.delete("/{patient_id}")
async def delete_patient(
    patient_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: PatientFacade = Depends(get_patient_facade)
) -> Any:
    return await facade.delete_patient(queue, patient_id)


@patient_router.patch("/{patient_id}/dental-chart")
async def update_dental_chart(
    patient_id: str,
    body: DentalChartUpdate,
    queue: str = Depends(resolve_target_queue),
    facade: PatientFacade = Depends(get_patient_facade)
) -> Any:
    return await facade.update_dental_chart(queue, patient_id, body.to_payload())


@patient_router.get("/{patient_id}/dental-chart")
async def get_dental_chart(
    patient_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: PatientFacade = Depends(get_patient_facade)
) -> Any:
    return await facade.get_dental_chart(queue, patient_id)


# === TÂCHES ===

@task_router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(
    body: TaskCreate,
    queue: str = Depends(resolve_target_queue),
    facade: TaskFacade = Depends(get_task_facade)
) -> Any:
    return await facade.create_task(queue, body.to_payload())


@task_router.get("")
async def get_all_tasks(
    queue: str = Depends(resolve_target_queue),
    facade: TaskFacade = Depends(get_task_facade)
) -> Any:
    return await facade.get_all_tasks(queue)


@task_router.get("/user/{user_id}")
async def get_tasks_by_user(
    user_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: TaskFacade = Depends(get_task_facade)
) -> Any:
    return await facade.get_tasks_by_user(queue, user_id)


@task_router.get("/status/{task_status}")
async def get_tasks_by_status(
    task_status: TaskStatus,
    queue: str = Depends(resolve_target_queue),
    facade: TaskFacade = Depends(get_task_facade)
) -> Any:
    return await facade.get_tasks_by_status(queue, task_status.value)


@task_router.get("/{task_id}")
async def get_task_by_id(
    task_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: TaskFacade = Depends(get_task_facade)
) -> Any:
    return await facade.get_task_by_id(queue, task_id)


@task_router.put("/{task_id}")
async def update_task(
    task_id: str,
    body: TaskUpdate,
    queue: str = Depends(resolve_target_queue),
    facade: TaskFacade = Depends(get_task_facade)
) -> Any:
    return await facade.update_task(queue, task_id, body.to_payload(exclude_unset=True))


@task_router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: TaskFacade = Depends(get_task_facade)
) -> Any:
    return await facade.delete_task(queue, task_id)


@task_router.post("/{task_id}/complete")
async def complete_task(
    task_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: TaskFacade = Depends(get_task_facade)
) -> Any:
    return await facade.complete_task(queue, task_id)


# === PLANS ===

@plan_router.post("", status_code=status.HTTP_201_CREATED)
async def create_plan(
    body: PlanCreate,
    queue: str = Depends(resolve_target_queue),
    facade: PlanFacade = Depends(get_plan_facade)
) -> Any:
    return await facade.create_plan(queue, body.to_payload())


@plan_router.get("")
async def get_all_plans(
    queue: str = Depends(resolve_target_queue),
    facade: PlanFacade = Depends(get_plan_facade)
) -> Any:
    return await facade.get_all_plans(queue)


@plan_router.get("/{plan_id}")
async def get_plan_by_id(
    plan_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: PlanFacade = Depends(get_plan_facade)
) -> Any:
    return await facade.get_plan_by_id(queue, plan_id)


@plan_router.put("/{plan_id}")
async def update_plan(
    plan_id: str,
    body: PlanUpdate,
    queue: str = Depends(resolve_target_queue),
    facade: PlanFacade = Depends(get_plan_facade)
) -> Any:
    return await facade.update_plan(queue, plan_id, body.to_payload(exclude_unset=True))


@plan_router.delete("/{plan_id}")
async def delete_plan(
    plan_id: str,
    queue: str = Depends(resolve_target_queue),
    facade: PlanFacade = Depends(get_plan_facade)
) -> Any:
    return await facade.delete_plan(queue, plan_id)


# === NOTIFICATIONS ===

@notification_router.post("", status_code=status.HTTP_202_ACCEPTED)
async def send_notification(
    body: NotificationCreate,
    queue: str = Depends(resolve_target_queue),
    facade: NotificationFacade = Depends(get_notification_facade)
) -> Any:
    return await facade.send_notification(queue, body.to_payload())


@notification_router.post("/verify-user-establishment")
async def verify_user_establishment(
    body: UserEstablishmentCheck,
    queue: str = Depends(resolve_target_queue),
    facade: NotificationFacade = Depends(get_notification_facade)
) -> Any:
    return await facade.verify_user_establishment(queue, body.user_id, body.establishment_id)


ROUTERS = [
    lot_router,
    supplier_router,
    storage_location_router,
    inventory_item_router,
    transaction_router,
    appointment_router,
    patient_router,
    task_router,
    plan_router,
    notification_router,
]
