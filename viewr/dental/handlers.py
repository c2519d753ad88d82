"""
Handlers du service Dental : lots, rendez-vous, patients et tâches

L'inventaire hors lots est dans ``inventory``.

Chaque handler reçoit la charge utile décodée de l'enveloppe et retourne
un dictionnaire (ou une liste) sérialisable, ou lève une ``RpcError``.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError

from ..shared.consumer import MessageHandlerRegistry
from ..shared.database import DatabaseManager
from ..shared.dto import (
    LotCreate, LotUpdate, LotStatus,
    AppointmentCreate, AppointmentUpdate, AppointmentStatus, AppointmentSearch, DateRange,
    PatientCreate, PatientUpdate, PatientSearch, DentalChartUpdate,
    TaskCreate, TaskUpdate, TaskStatus, as_utc
)
from ..shared.errors import ConflictError, NotFoundError, PayloadValidationError
from ..shared.operations import AppointmentOperation, LotOperation, PatientOperation, TaskOperation
from ..shared.payloads import parse_model, require_field, require_id
from ..shared.utils import LoggerFactory

from .inventory import _allowed, _apply, register_inventory
from .models import DentalAppointment, DentalPatient, Lot, Supplier, Task


class LotHandlers:
    """Lots d'inventaire et leurs fournisseurs"""

    def __init__(self, db: DatabaseManager):
        self.db = db
        self.logger = LoggerFactory.get_logger("dental.lots")

    def register(self, registry: MessageHandlerRegistry) -> None:
        registry.register(LotOperation.CREATE, self.create)
        registry.register(LotOperation.FIND_ALL, self.find_all)
        registry.register(LotOperation.FIND_ONE, self.find_one)
        registry.register(LotOperation.UPDATE, self.update)
        registry.register(LotOperation.REMOVE, self.remove)
        registry.register(LotOperation.FIND_BY_INVENTORY_ITEM, self.find_by_inventory_item)
        registry.register(LotOperation.FIND_BY_STATUS, self.find_by_status)
        registry.register(LotOperation.FIND_BY_STORAGE_LOCATION, self.find_by_storage_location)
        registry.register(LotOperation.FIND_BY_SUPPLIER, self.find_by_supplier)

    def _get(self, session, lot_id: str) -> Lot:
        lot = session.get(Lot, lot_id)
        if lot is None:
            self.logger.warning(f"Lot introuvable: {lot_id}")
            raise NotFoundError(f"Lot with ID {lot_id} not found")
        return lot

    def create(self, payload: Any) -> Dict[str, Any]:
        dto = parse_model(LotCreate, payload)
        self.logger.info(f"Création d'un lot pour l'article: {dto.inventory_item_id}")

        with self.db.session_scope() as session:
            if dto.supplier_id:
                if session.get(Supplier, dto.supplier_id) is None:
                    raise NotFoundError(f"Supplier with ID {dto.supplier_id} not found")
                supplier_id = dto.supplier_id
            elif dto.new_supplier is not None:
                supplier = Supplier(**dto.new_supplier.model_dump())
                session.add(supplier)
                session.flush()
                supplier_id = supplier.id
                self.logger.info(f"Fournisseur créé: {supplier_id}")
            else:
                raise PayloadValidationError("Either supplierId or newSupplier must be provided")

            data = dto.model_dump(exclude={"new_supplier", "supplier_id"})
            lot = Lot(supplier_id=supplier_id, **data)
            session.add(lot)
            session.flush()
            session.refresh(lot)
            self.logger.info(f"✅ Lot créé: {lot.id}")
            return lot.to_dict()

    def find_all(self, payload: Any) -> List[Dict[str, Any]]:
        with self.db.session_scope() as session:
            lots = session.query(Lot).order_by(Lot.created_at).all()
            return [lot.to_dict() for lot in lots]

    def find_one(self, payload: Any) -> Dict[str, Any]:
        with self.db.session_scope() as session:
            return self._get(session, require_id(payload)).to_dict()

    def update(self, payload: Any) -> Dict[str, Any]:
        lot_id = require_id(payload)
        dto = parse_model(LotUpdate, require_field(payload, "data"))
        with self.db.session_scope() as session:
            lot = self._get(session, lot_id)
            changes = dto.model_dump(exclude_unset=True)
            if "supplier_id" in changes and session.get(Supplier, changes["supplier_id"]) is None:
                raise NotFoundError(f"Supplier with ID {changes['supplier_id']} not found")
            _apply(lot, changes)
            session.flush()
            session.refresh(lot)
            return lot.to_dict()

    def remove(self, payload: Any) -> Dict[str, Any]:
        lot_id = require_id(payload)
        with self.db.session_scope() as session:
            session.delete(self._get(session, lot_id))
        self.logger.info(f"Lot supprimé: {lot_id}")
        return {"id": lot_id, "deleted": True}

    def _find_by(self, column, value) -> List[Dict[str, Any]]:
        with self.db.session_scope() as session:
            lots = session.query(Lot).filter(column == value).order_by(Lot.created_at).all()
            return [lot.to_dict() for lot in lots]

    def find_by_inventory_item(self, payload: Any) -> List[Dict[str, Any]]:
        return self._find_by(Lot.inventory_item_id, require_field(payload, "inventoryItemId"))

    def find_by_status(self, payload: Any) -> List[Dict[str, Any]]:
        status = _allowed(require_field(payload, "status"), LotStatus, "status")
        return self._find_by(Lot.status, status)

    def find_by_storage_location(self, payload: Any) -> List[Dict[str, Any]]:
        return self._find_by(Lot.storage_location_id, require_field(payload, "storageLocationId"))

    def find_by_supplier(self, payload: Any) -> List[Dict[str, Any]]:
        return self._find_by(Lot.supplier_id, require_field(payload, "supplierId"))


class AppointmentHandlers:
    """Rendez-vous dentaires"""

    def __init__(self, db: DatabaseManager):
        self.db = db
        self.logger = LoggerFactory.get_logger("dental.appointments")

    def register(self, registry: MessageHandlerRegistry) -> None:
        registry.register(AppointmentOperation.CREATE, self.create)
        registry.register(AppointmentOperation.FIND_ALL, self.find_all)
        registry.register(AppointmentOperation.FIND_ONE, self.find_one)
        registry.register(AppointmentOperation.UPDATE, self.update)
        registry.register(AppointmentOperation.REMOVE, self.remove)
        registry.register(AppointmentOperation.FIND_BY_PATIENT, self.find_by_patient)
        registry.register(AppointmentOperation.FIND_BY_DENTIST, self.find_by_dentist)
        registry.register(AppointmentOperation.FIND_BY_STATUS, self.find_by_status)
        registry.register(AppointmentOperation.FIND_BY_DATE_RANGE, self.find_by_date_range)
        registry.register(AppointmentOperation.COMPLETE, self.complete)
        registry.register(AppointmentOperation.SEARCH, self.search)

    def _get(self, session, appointment_id: str) -> DentalAppointment:
        appointment = session.get(DentalAppointment, appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment not found")
        return appointment

    def _list(self, *criteria) -> List[Dict[str, Any]]:
        with self.db.session_scope() as session:
            query = session.query(DentalAppointment)
            for criterion in criteria:
                query = query.filter(criterion)
            appointments = query.order_by(DentalAppointment.start_time).all()
            return [appointment.to_dict() for appointment in appointments]

    def create(self, payload: Any) -> Dict[str, Any]:
        dto = parse_model(AppointmentCreate, payload)
        self.logger.info(f"Création du rendez-vous {dto.appointment_type} pour le patient {dto.patient_id}")

        with self.db.session_scope() as session:
            if session.get(DentalPatient, dto.patient_id) is None:
                raise NotFoundError("Patient not found")

            appointment = DentalAppointment(**dto.model_dump())
            session.add(appointment)
            session.flush()
            session.refresh(appointment)
            return appointment.to_dict()

    def find_all(self, payload: Any) -> List[Dict[str, Any]]:
        return self._list()

    def find_one(self, payload: Any) -> Dict[str, Any]:
        with self.db.session_scope() as session:
            return self._get(session, require_id(payload)).to_dict()

    def update(self, payload: Any) -> Dict[str, Any]:
        appointment_id = require_id(payload)
        dto = parse_model(AppointmentUpdate, require_field(payload, "data"))
        with self.db.session_scope() as session:
            appointment = self._get(session, appointment_id)
            _apply(appointment, dto.model_dump(exclude_unset=True))
            if as_utc(appointment.end_time) <= as_utc(appointment.start_time):
                raise PayloadValidationError("endTime must be after startTime")
            session.flush()
            session.refresh(appointment)
            return appointment.to_dict()

    def remove(self, payload: Any) -> Dict[str, Any]:
        appointment_id = require_id(payload)
        with self.db.session_scope() as session:
            session.delete(self._get(session, appointment_id))
        return {"id": appointment_id, "deleted": True}

    def find_by_patient(self, payload: Any) -> List[Dict[str, Any]]:
        return self._list(DentalAppointment.patient_id == require_field(payload, "patientId"))

    def find_by_dentist(self, payload: Any) -> List[Dict[str, Any]]:
        return self._list(DentalAppointment.dentist_id == require_field(payload, "dentistId"))

    def find_by_status(self, payload: Any) -> List[Dict[str, Any]]:
        status = _allowed(require_field(payload, "status"), AppointmentStatus, "status")
        return self._list(DentalAppointment.status == status)

    def find_by_date_range(self, payload: Any) -> List[Dict[str, Any]]:
        window = parse_model(DateRange, payload)
        return self._list(DentalAppointment.start_time.between(window.start_date, window.end_date))

    def complete(self, payload: Any) -> Dict[str, Any]:
        appointment_id = require_id(payload)
        with self.db.session_scope() as session:
            appointment = self._get(session, appointment_id)
            appointment.status = AppointmentStatus.COMPLETED.value
            session.flush()
            session.refresh(appointment)
            self.logger.info(f"Rendez-vous terminé: {appointment_id}")
            return appointment.to_dict()

    def search(self, payload: Any) -> List[Dict[str, Any]]:
        criteria = parse_model(AppointmentSearch, payload or {})
        filters = []
        if criteria.patient_id:
            filters.append(DentalAppointment.patient_id == criteria.patient_id)
        if criteria.dentist_id:
            filters.append(DentalAppointment.dentist_id == criteria.dentist_id)
        if criteria.appointment_type:
            filters.append(DentalAppointment.appointment_type == criteria.appointment_type)
        if criteria.status:
            filters.append(DentalAppointment.status == criteria.status)
        if criteria.start_date and criteria.end_date:
            filters.append(DentalAppointment.start_time.between(criteria.start_date, criteria.end_date))
        return self._list(*filters)


class PatientHandlers:
    """Dossiers patients et schémas dentaires"""

    def __init__(self, db: DatabaseManager):
        self.db = db
        self.logger = LoggerFactory.get_logger("dental.patients")

    def register(self, registry: MessageHandlerRegistry) -> None:
        registry.register(PatientOperation.CREATE, self.create)
        registry.register(PatientOperation.FIND_ALL, self.find_all)
        registry.register(PatientOperation.FIND_ONE, self.find_one)
        registry.register(PatientOperation.UPDATE, self.update)
        registry.register(PatientOperation.REMOVE, self.remove)
        registry.register(PatientOperation.UPDATE_DENTAL_CHART, self.update_dental_chart)
        registry.register(PatientOperation.GET_DENTAL_CHART, self.get_dental_chart)
        registry.register(PatientOperation.SEARCH, self.search)

    def _get(self, session, patient_id: str) -> DentalPatient:
        patient = session.get(DentalPatient, patient_id)
        if patient is None:
            raise NotFoundError("Patient not found")
        return patient

    def _flush(self, session) -> None:
        try:
            session.flush()
        except IntegrityError as e:
            session.rollback()
            raise ConflictError("Patient with this CIN already exists") from e

    def create(self, payload: Any) -> Dict[str, Any]:
        dto = parse_model(PatientCreate, payload)
        self.logger.info("Création d'un patient")
        with self.db.session_scope() as session:
            patient = DentalPatient(**dto.model_dump())
            session.add(patient)
            self._flush(session)
            session.refresh(patient)
            return patient.to_dict()

    def find_all(self, payload: Any) -> List[Dict[str, Any]]:
        with self.db.session_scope() as session:
            patients = session.query(DentalPatient).order_by(DentalPatient.last_name, DentalPatient.first_name).all()
            return [patient.to_dict() for patient in patients]

    def find_one(self, payload: Any) -> Dict[str, Any]:
        with self.db.session_scope() as session:
            return self._get(session, require_id(payload)).to_dict()

    def update(self, payload: Any) -> Dict[str, Any]:
        patient_id = require_id(payload)
        dto = parse_model(PatientUpdate, require_field(payload, "data"))
        with self.db.session_scope() as session:
            patient = self._get(session, patient_id)
            _apply(patient, dto.model_dump(exclude_unset=True))
            self._flush(session)
            session.refresh(patient)
            return patient.to_dict()

    def remove(self, payload: Any) -> Dict[str, Any]:
        patient_id = require_id(payload)
        with self.db.session_scope() as session:
            session.delete(self._get(session, patient_id))
        return {"id": patient_id, "deleted": True}

    def update_dental_chart(self, payload: Any) -> Dict[str, Any]:
        patient_id = require_id(payload)
        dto = parse_model(DentalChartUpdate, require_field(payload, "data"))
        with self.db.session_scope() as session:
            patient = self._get(session, patient_id)
            patient.dental_chart = dto.dental_chart
            session.flush()
            session.refresh(patient)
            return patient.to_dict()

    def get_dental_chart(self, payload: Any) -> Dict[str, Any]:
        with self.db.session_scope() as session:
            patient = self._get(session, require_id(payload))
            return {"patientId": patient.id, "dentalChart": patient.dental_chart or {}}

    def search(self, payload: Any) -> List[Dict[str, Any]]:
        criteria = parse_model(PatientSearch, payload or {})
        with self.db.session_scope() as session:
            query = session.query(DentalPatient)
            if criteria.first_name:
                query = query.filter(DentalPatient.first_name.ilike(f"%{criteria.first_name}%"))
            if criteria.last_name:
                query = query.filter(DentalPatient.last_name.ilike(f"%{criteria.last_name}%"))
            if criteria.cin:
                query = query.filter(DentalPatient.cin == criteria.cin)
            if criteria.phone_number:
                query = query.filter(DentalPatient.phone_number.ilike(f"%{criteria.phone_number}%"))
            if criteria.email:
                query = query.filter(DentalPatient.email.ilike(f"%{criteria.email}%"))
            if criteria.date_of_birth_from and criteria.date_of_birth_to:
                query = query.filter(DentalPatient.date_of_birth.between(
                    criteria.date_of_birth_from, criteria.date_of_birth_to
                ))
            patients = query.order_by(DentalPatient.last_name, DentalPatient.first_name).all()
            return [patient.to_dict() for patient in patients]


class TaskHandlers:
    """Tâches du cabinet"""

    def __init__(self, db: DatabaseManager):
        self.db = db
        self.logger = LoggerFactory.get_logger("dental.tasks")

    def register(self, registry: MessageHandlerRegistry) -> None:
        registry.register(TaskOperation.CREATE, self.create)
        registry.register(TaskOperation.FIND_ALL, self.find_all)
        registry.register(TaskOperation.FIND_ONE, self.find_one)
        registry.register(TaskOperation.UPDATE, self.update)
        registry.register(TaskOperation.REMOVE, self.remove)
        registry.register(TaskOperation.FIND_BY_USER, self.find_by_user)
        registry.register(TaskOperation.FIND_BY_STATUS, self.find_by_status)
        registry.register(TaskOperation.COMPLETE, self.complete)

    def _get(self, session, task_id: str) -> Task:
        task = session.get(Task, task_id)
        if task is None:
            raise NotFoundError(f"Task with ID {task_id} not found")
        return task

    def _list(self, *criteria) -> List[Dict[str, Any]]:
        with self.db.session_scope() as session:
            query = session.query(Task)
            for criterion in criteria:
                query = query.filter(criterion)
            # Plus récentes d'abord
            tasks = query.order_by(Task.created_at.desc()).all()
            return [task.to_dict() for task in tasks]

    def create(self, payload: Any) -> Dict[str, Any]:
        dto = parse_model(TaskCreate, payload)
        with self.db.session_scope() as session:
            task = Task(**dto.model_dump())
            session.add(task)
            session.flush()
            session.refresh(task)
            self.logger.info(f"Tâche créée: {task.id} pour {task.user_id}")
            return task.to_dict()

    def find_all(self, payload: Any) -> List[Dict[str, Any]]:
        return self._list()

    def find_one(self, payload: Any) -> Dict[str, Any]:
        with self.db.session_scope() as session:
            return self._get(session, require_id(payload)).to_dict()

    def update(self, payload: Any) -> Dict[str, Any]:
        task_id = require_id(payload)
        dto = parse_model(TaskUpdate, require_field(payload, "data"))
        with self.db.session_scope() as session:
            task = self._get(session, task_id)
            _apply(task, dto.model_dump(exclude_unset=True))
            session.flush()
            session.refresh(task)
            return task.to_dict()

    def remove(self, payload: Any) -> Dict[str, Any]:
        task_id = require_id(payload)
        with self.db.session_scope() as session:
            session.delete(self._get(session, task_id))
        return {"id": task_id, "deleted": True}

    def find_by_user(self, payload: Any) -> List[Dict[str, Any]]:
        return self._list(Task.user_id == require_field(payload, "userId"))

    def find_by_status(self, payload: Any) -> List[Dict[str, Any]]:
        status = _allowed(require_field(payload, "status"), TaskStatus, "status")
        return self._list(Task.status == status)

    def complete(self, payload: Any) -> Dict[str, Any]:
        task_id = require_id(payload)
        with self.db.session_scope() as session:
            task = self._get(session, task_id)
            task.status = TaskStatus.COMPLETED.value
            task.completed_at = datetime.now(timezone.utc)
            session.flush()
            session.refresh(task)
            return task.to_dict()


def build_registry(db: DatabaseManager) -> MessageHandlerRegistry:
    """Table complète des opérations du service Dental"""
    registry = MessageHandlerRegistry()
    LotHandlers(db).register(registry)
    register_inventory(db, registry)
    AppointmentHandlers(db).register(registry)
    PatientHandlers(db).register(registry)
    TaskHandlers(db).register(registry)
    return registry
