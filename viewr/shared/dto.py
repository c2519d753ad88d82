"""
Modèles Pydantic échangés entre la passerelle et les microservices

Les champs sont exposés en camelCase sur le fil (``by_alias``) et
acceptés indifféremment en camelCase ou snake_case.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class LotStatus(str, Enum):
    """Statuts d'un lot d'inventaire"""
    AVAILABLE = "available"
    EXPIRED = "expired"
    DEPLETED = "depleted"
    QUARANTINED = "quarantined"


class AppointmentStatus(str, Enum):
    """Statuts d'un rendez-vous"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELED = "canceled"
    NO_SHOW = "no_show"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class TaskStatus(str, Enum):
    """Statuts d'une tâche"""
    TO_DO = "to_do"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    """Priorités d'une tâche"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class StorageLocationStatus(str, Enum):
    """Statuts d'un emplacement de stockage"""
    ACTIVE = "active"
    EXPIRED = "expired"


class InventoryItemCategory(str, Enum):
    """Catégories d'articles d'inventaire"""
    INSTRUMENT = "instrument"
    MATERIAL = "material"
    MEDICATION = "medication"
    EQUIPMENT = "equipment"
    HYGIENE = "hygiene"
    OTHER = "other"


class StorageCondition(str, Enum):
    """Conditions de conservation"""
    ROOM_TEMPERATURE = "room_temperature"
    REFRIGERATED = "refrigerated"
    FROZEN = "frozen"
    DRY = "dry"


class TransactionType(str, Enum):
    """Types de mouvement de stock"""
    IN = "in"
    OUT = "out"
    ADJUSTMENT = "adjustment"
    RETURN = "return"


class NotificationType(str, Enum):
    """Portée d'une notification"""
    ALL = "ALL"
    USER = "USER"


def as_utc(value: datetime) -> datetime:
    """Datetime comparable : les valeurs naïves sont considérées UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class WireModel(BaseModel):
    """Base des DTO : alias camelCase, champs inconnus refusés"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
        extra="forbid"
    )

    def to_payload(self, exclude_unset: bool = False) -> Dict[str, Any]:
        """Dictionnaire JSON prêt à publier"""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=exclude_unset)


# ===== INVENTAIRE =====

class SupplierCreate(WireModel):
    name: str = Field(..., min_length=1, max_length=200)
    contact_person_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1, max_length=30)
    email: Optional[str] = None
    address: Optional[str] = None


class SupplierUpdate(WireModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    contact_person_name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = Field(None, min_length=1, max_length=30)
    email: Optional[str] = None
    address: Optional[str] = None


class StorageLocationCreate(WireModel):
    location_name: str = Field(..., min_length=1, max_length=200)
    status: StorageLocationStatus = StorageLocationStatus.ACTIVE


class StorageLocationUpdate(WireModel):
    location_name: Optional[str] = Field(None, min_length=1, max_length=200)
    status: Optional[StorageLocationStatus] = None


class StorageLocationMerge(WireModel):
    """Fusion : les lots de ``sourceId`` passent sur ``targetId``"""
    source_id: str = Field(..., min_length=1)
    target_id: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_distinct(self):
        if self.source_id == self.target_id:
            raise ValueError("sourceId et targetId doivent être différents")
        return self


class InventoryItemCreate(WireModel):
    name: str = Field(..., min_length=1, max_length=200)
    category: InventoryItemCategory
    unit: str = Field(..., min_length=1, max_length=50)
    storage_condition: StorageCondition
    description: Optional[str] = None
    is_consumable: bool = False
    is_reusable: bool = False


class InventoryItemUpdate(WireModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[InventoryItemCategory] = None
    unit: Optional[str] = Field(None, min_length=1, max_length=50)
    storage_condition: Optional[StorageCondition] = None
    description: Optional[str] = None
    is_consumable: Optional[bool] = None
    is_reusable: Optional[bool] = None


class TransactionCreate(WireModel):
    inventory_item_id: str = Field(..., min_length=1)
    date: datetime
    type: TransactionType
    quantity: float = Field(..., ge=0)


class TransactionUpdate(WireModel):
    date: Optional[datetime] = None
    type: Optional[TransactionType] = None
    quantity: Optional[float] = Field(None, ge=0)


class LotCreate(WireModel):
    """Création d'un lot : ``supplierId`` ou ``newSupplier`` est requis"""
    inventory_item_id: Optional[str] = None
    supplier_id: Optional[str] = None
    new_supplier: Optional[SupplierCreate] = None
    storage_location_id: str
    receive_date: datetime
    expiry_date: datetime
    quantity: int = Field(..., ge=0)
    status: LotStatus = LotStatus.AVAILABLE
    location: str = Field(..., min_length=1)


class LotUpdate(WireModel):
    inventory_item_id: Optional[str] = None
    supplier_id: Optional[str] = None
    storage_location_id: Optional[str] = None
    receive_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    quantity: Optional[int] = Field(None, ge=0)
    status: Optional[LotStatus] = None
    location: Optional[str] = None
    last_checked_date: Optional[datetime] = None
    last_used_date: Optional[datetime] = None


# ===== PATIENTS =====

class PatientCreate(WireModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    nationality: str = Field(..., max_length=100)
    city: str = Field(..., max_length=100)
    address: str
    gender: Gender
    cin: str = Field(..., min_length=1, max_length=50)
    date_of_birth: date
    insurance_type: str = "CNAM"
    insurance_id: Optional[str] = None
    phone_number: str = Field(..., min_length=1, max_length=20)
    email: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    medical_history: Optional[List[str]] = None
    allergies: Optional[List[str]] = None
    medications: Optional[List[str]] = None
    dental_chart: Optional[Dict[str, Any]] = None


class PatientUpdate(WireModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    nationality: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    gender: Optional[Gender] = None
    cin: Optional[str] = None
    date_of_birth: Optional[date] = None
    insurance_type: Optional[str] = None
    insurance_id: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    medical_history: Optional[List[str]] = None
    allergies: Optional[List[str]] = None
    medications: Optional[List[str]] = None


class DentalChartUpdate(WireModel):
    dental_chart: Dict[str, Any]


# ===== RENDEZ-VOUS =====

class AppointmentCreate(WireModel):
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus = AppointmentStatus.PENDING
    appointment_type: str = Field(..., min_length=1, max_length=100)
    notes: Optional[str] = None
    treatment_plan: Optional[str] = None
    diagnosis: Optional[str] = None
    procedures_conducted: Optional[List[str]] = None
    total_amount: Optional[float] = Field(None, ge=0)
    paid_amount: Optional[float] = Field(None, ge=0)
    patient_id: str
    dentist_id: str
    room_number: Optional[str] = None
    follow_up_required: bool = False
    follow_up_date: Optional[datetime] = None
    prescriptions: Optional[List[str]] = None
    xray_urls: Optional[List[str]] = None
    dental_photos: Optional[List[str]] = None

    @model_validator(mode="after")
    def check_time_window(self):
        if as_utc(self.end_time) <= as_utc(self.start_time):
            raise ValueError("endTime doit être postérieur à startTime")
        return self


class AppointmentUpdate(WireModel):
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    status: Optional[AppointmentStatus] = None
    appointment_type: Optional[str] = None
    notes: Optional[str] = None
    treatment_plan: Optional[str] = None
    diagnosis: Optional[str] = None
    procedures_conducted: Optional[List[str]] = None
    total_amount: Optional[float] = Field(None, ge=0)
    paid_amount: Optional[float] = Field(None, ge=0)
    dentist_id: Optional[str] = None
    room_number: Optional[str] = None
    follow_up_required: Optional[bool] = None
    follow_up_date: Optional[datetime] = None
    prescriptions: Optional[List[str]] = None
    xray_urls: Optional[List[str]] = None
    dental_photos: Optional[List[str]] = None


class DateRange(WireModel):
    start_date: datetime
    end_date: datetime

    @model_validator(mode="after")
    def check_order(self):
        if as_utc(self.end_date) < as_utc(self.start_date):
            raise ValueError("endDate doit être postérieur à startDate")
        return self


# ===== TÂCHES =====

class TaskCreate(WireModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str
    deadline: datetime
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TO_DO
    user_id: str = Field(..., min_length=1)


class TaskUpdate(WireModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    completed_at: Optional[datetime] = None


# ===== PLANS =====

class PlanCreate(WireModel):
    name: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., gt=0)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name ne peut pas être vide")
        return v


class PlanUpdate(WireModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, gt=0)
    is_active: Optional[bool] = None


# ===== NOTIFICATIONS =====

class NotificationCreate(WireModel):
    type: NotificationType
    message: str = Field(..., min_length=1, max_length=2000)
    establishment_id: str = Field(..., min_length=1)
    user_id: Optional[str] = None
    sent_by: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_recipient(self):
        if self.type == NotificationType.USER.value and not self.user_id:
            raise ValueError("userId est requis pour une notification USER")
        return self


class UserEstablishmentCheck(WireModel):
    user_id: str = Field(..., min_length=1)
    establishment_id: str = Field(..., min_length=1)


# ===== RECHERCHE =====

class AppointmentSearch(WireModel):
    patient_id: Optional[str] = None
    dentist_id: Optional[str] = None
    appointment_type: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class PatientSearch(WireModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    cin: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    date_of_birth_from: Optional[date] = None
    date_of_birth_to: Optional[date] = None
