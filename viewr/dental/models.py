"""
Modèles SQLAlchemy du service Dental
"""

from datetime import datetime, timezone
from typing import Any, Dict
import uuid

from sqlalchemy import Column, String, DateTime, Date, Boolean, Text, Integer, Numeric, JSON, ForeignKey, Index
from sqlalchemy.orm import declarative_base, relationship


Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value) -> Any:
    return value.isoformat() if value is not None else None


def _amount(value) -> Any:
    return float(value) if value is not None else None


class Supplier(Base):
    """Fournisseur de lots"""

    __tablename__ = "suppliers"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(200), nullable=False)
    contact_person_name = Column(String(200), nullable=False)
    phone = Column(String(30), nullable=False)
    email = Column(String(255))
    address = Column(Text)

    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "contactPersonName": self.contact_person_name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at)
        }


class StorageLocation(Base):
    """Emplacement de stockage ; un emplacement fusionné passe à ``expired``"""

    __tablename__ = "storage_locations"

    id = Column(String(36), primary_key=True, default=_uuid)
    location_name = Column(String(200), nullable=False)
    status = Column(String(20), nullable=False, default="active", index=True)

    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "locationName": self.location_name,
            "status": self.status,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at)
        }


class InventoryItem(Base):
    """Article d'inventaire ; le stock courant est la somme de ses lots"""

    __tablename__ = "inventory_items"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(200), nullable=False, index=True)
    category = Column(String(30), nullable=False, index=True)
    unit = Column(String(50), nullable=False)
    storage_condition = Column(String(30), nullable=False)
    description = Column(Text)
    is_consumable = Column(Boolean, nullable=False, default=False)
    is_reusable = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    def to_dict(self, current_stock: int = 0) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "unit": self.unit,
            "storageCondition": self.storage_condition,
            "description": self.description,
            "isConsumable": self.is_consumable,
            "isReusable": self.is_reusable,
            "currentStock": current_stock,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at)
        }


class Transaction(Base):
    """Mouvement de stock d'un article"""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=_uuid)
    inventory_item_id = Column(String(36), ForeignKey("inventory_items.id"), nullable=False, index=True)
    date = Column(DateTime(timezone=True), nullable=False)
    type = Column(String(20), nullable=False, index=True)
    quantity = Column(Numeric(10, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    inventory_item = relationship("InventoryItem", lazy="joined")

    def to_dict(self) -> Dict[str, Any]:
        item = self.inventory_item
        return {
            "id": self.id,
            "inventoryItemId": self.inventory_item_id,
            "inventoryItem": {"id": item.id, "name": item.name, "unit": item.unit} if item else None,
            "date": _iso(self.date),
            "type": self.type,
            "quantity": _amount(self.quantity),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at)
        }


class Lot(Base):
    """Lot d'inventaire"""

    __tablename__ = "lots"

    id = Column(String(36), primary_key=True, default=_uuid)
    inventory_item_id = Column(String(36), index=True)
    supplier_id = Column(String(36), ForeignKey("suppliers.id"), nullable=False, index=True)
    storage_location_id = Column(String(36), nullable=False, index=True)
    receive_date = Column(DateTime(timezone=True), nullable=False)
    expiry_date = Column(DateTime(timezone=True), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    last_checked_date = Column(DateTime(timezone=True))
    last_used_date = Column(DateTime(timezone=True))
    status = Column(String(20), nullable=False, default="available", index=True)
    location = Column(String(200), nullable=False)

    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    supplier = relationship("Supplier", lazy="joined")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "inventoryItemId": self.inventory_item_id,
            "supplierId": self.supplier_id,
            "supplier": self.supplier.to_dict() if self.supplier else None,
            "storageLocationId": self.storage_location_id,
            "receiveDate": _iso(self.receive_date),
            "expiryDate": _iso(self.expiry_date),
            "quantity": self.quantity,
            "lastCheckedDate": _iso(self.last_checked_date),
            "lastUsedDate": _iso(self.last_used_date),
            "status": self.status,
            "location": self.location,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at)
        }


class DentalPatient(Base):
    """Patient du cabinet dentaire"""

    __tablename__ = "dental_patients"

    id = Column(String(36), primary_key=True, default=_uuid)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    nationality = Column(String(100), nullable=False)
    city = Column(String(100), nullable=False)
    address = Column(Text, nullable=False)
    gender = Column(String(10), nullable=False)
    cin = Column(String(50), nullable=False, unique=True)
    date_of_birth = Column(Date, nullable=False)
    insurance_type = Column(String(50), nullable=False, default="CNAM")
    insurance_id = Column(String(100))
    phone_number = Column(String(20), nullable=False)
    email = Column(String(255))
    emergency_contact = Column(String(255))
    emergency_phone = Column(String(20))
    medical_history = Column(JSON)
    allergies = Column(JSON)
    medications = Column(JSON)
    dental_chart = Column(JSON)

    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    appointments = relationship("DentalAppointment", back_populates="patient", cascade="all, delete-orphan")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "nationality": self.nationality,
            "city": self.city,
            "address": self.address,
            "gender": self.gender,
            "cin": self.cin,
            "dateOfBirth": _iso(self.date_of_birth),
            "insuranceType": self.insurance_type,
            "insuranceId": self.insurance_id,
            "phoneNumber": self.phone_number,
            "email": self.email,
            "emergencyContact": self.emergency_contact,
            "emergencyPhone": self.emergency_phone,
            "medicalHistory": self.medical_history,
            "allergies": self.allergies,
            "medications": self.medications,
            "dentalChart": self.dental_chart,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at)
        }


class DentalAppointment(Base):
    """Rendez-vous dentaire"""

    __tablename__ = "dental_appointments"

    id = Column(String(36), primary_key=True, default=_uuid)
    start_time = Column(DateTime(timezone=True), nullable=False, index=True)
    end_time = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    appointment_type = Column(String(100), nullable=False)
    notes = Column(Text)
    treatment_plan = Column(Text)
    diagnosis = Column(Text)
    procedures_conducted = Column(JSON)
    total_amount = Column(Numeric(10, 2))
    paid_amount = Column(Numeric(10, 2))
    patient_id = Column(String(36), ForeignKey("dental_patients.id"), nullable=False, index=True)
    dentist_id = Column(String(36), nullable=False, index=True)
    room_number = Column(String(50))
    follow_up_required = Column(Boolean, default=False)
    follow_up_date = Column(DateTime(timezone=True))
    prescriptions = Column(JSON)
    xray_urls = Column(JSON)
    dental_photos = Column(JSON)

    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    patient = relationship("DentalPatient", back_populates="appointments", lazy="joined")

    __table_args__ = (
        Index("idx_appointment_dentist_start", "dentist_id", "start_time"),
    )

    def to_dict(self) -> Dict[str, Any]:
        patient = self.patient
        return {
            "id": self.id,
            "startTime": _iso(self.start_time),
            "endTime": _iso(self.end_time),
            "status": self.status,
            "appointmentType": self.appointment_type,
            "notes": self.notes,
            "treatmentPlan": self.treatment_plan,
            "diagnosis": self.diagnosis,
            "proceduresConducted": self.procedures_conducted,
            "totalAmount": _amount(self.total_amount),
            "paidAmount": _amount(self.paid_amount),
            "patientId": self.patient_id,
            "patient": {
                "id": patient.id,
                "firstName": patient.first_name,
                "lastName": patient.last_name,
                "phoneNumber": patient.phone_number
            } if patient else None,
            "dentistId": self.dentist_id,
            "roomNumber": self.room_number,
            "followUpRequired": self.follow_up_required,
            "followUpDate": _iso(self.follow_up_date),
            "prescriptions": self.prescriptions,
            "xrayUrls": self.xray_urls,
            "dentalPhotos": self.dental_photos,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at)
        }


class Task(Base):
    """Tâche assignée à un membre du cabinet"""

    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    deadline = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True))
    priority = Column(String(20), nullable=False, default="medium")
    status = Column(String(20), nullable=False, default="to_do", index=True)
    user_id = Column(String(100), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=_now, index=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "deadline": _iso(self.deadline),
            "completedAt": _iso(self.completed_at),
            "priority": self.priority,
            "status": self.status,
            "userId": self.user_id,
            "createdAt": _iso(self.created_at)
        }
