"""
Handlers d'inventaire du service Dental : fournisseurs, emplacements de
stockage, articles et mouvements de stock

Les lots référencent articles et emplacements par identifiant ; le stock
courant d'un article est la somme des quantités de ses lots.
"""

from typing import Any, Dict, List

from sqlalchemy import func

from ..shared.consumer import MessageHandlerRegistry
from ..shared.database import DatabaseManager
from ..shared.dto import (
    SupplierCreate, SupplierUpdate,
    StorageLocationCreate, StorageLocationUpdate, StorageLocationMerge, StorageLocationStatus,
    InventoryItemCreate, InventoryItemUpdate, InventoryItemCategory,
    TransactionCreate, TransactionUpdate, TransactionType
)
from ..shared.errors import ConflictError, NotFoundError, PayloadValidationError
from ..shared.operations import (
    InventoryItemOperation, StorageLocationOperation, SupplierOperation, TransactionOperation
)
from ..shared.payloads import parse_model, require_field, require_id
from ..shared.utils import LoggerFactory

from .models import InventoryItem, Lot, StorageLocation, Supplier, Transaction


def _allowed(value: str, enum_cls, field: str) -> str:
    allowed = [member.value for member in enum_cls]
    if value not in allowed:
        raise PayloadValidationError(f"{field} must be one of: {', '.join(allowed)}")
    return value


def _apply(entity, changes: Dict[str, Any]) -> None:
    for key, value in changes.items():
        setattr(entity, key, value)


class SupplierHandlers:
    """Fournisseurs des lots"""

    def __init__(self, db: DatabaseManager):
        self.db = db
        self.logger = LoggerFactory.get_logger("dental.suppliers")

    def register(self, registry: MessageHandlerRegistry) -> None:
        registry.register(SupplierOperation.CREATE, self.create)
        registry.register(SupplierOperation.FIND_ALL, self.find_all)
        registry.register(SupplierOperation.FIND_ONE, self.find_one)
        registry.register(SupplierOperation.UPDATE, self.update)
        registry.register(SupplierOperation.REMOVE, self.remove)

    def _get(self, session, supplier_id: str) -> Supplier:
        supplier = session.get(Supplier, supplier_id)
        if supplier is None:
            raise NotFoundError(f"Supplier with ID {supplier_id} not found")
        return supplier

    def create(self, payload: Any) -> Dict[str, Any]:
        dto = parse_model(SupplierCreate, payload)
        with self.db.session_scope() as session:
            supplier = Supplier(**dto.model_dump())
            session.add(supplier)
            session.flush()
            session.refresh(supplier)
            self.logger.info(f"Fournisseur créé: {supplier.id}")
            return supplier.to_dict()

    def find_all(self, payload: Any) -> List[Dict[str, Any]]:
        with self.db.session_scope() as session:
            return [supplier.to_dict() for supplier in session.query(Supplier).order_by(Supplier.name).all()]

    def find_one(self, payload: Any) -> Dict[str, Any]:
        with self.db.session_scope() as session:
            return self._get(session, require_id(payload)).to_dict()

    def update(self, payload: Any) -> Dict[str, Any]:
        supplier_id = require_id(payload)
        dto = parse_model(SupplierUpdate, require_field(payload, "data"))
        with self.db.session_scope() as session:
            supplier = self._get(session, supplier_id)
            _apply(supplier, dto.model_dump(exclude_unset=True))
            session.flush()
            session.refresh(supplier)
            return supplier.to_dict()

    def remove(self, payload: Any) -> Dict[str, Any]:
        supplier_id = require_id(payload)
        with self.db.session_scope() as session:
            supplier = self._get(session, supplier_id)
            if session.query(Lot).filter(Lot.supplier_id == supplier_id).count():
                raise ConflictError(f"Supplier with ID {supplier_id} still supplies lots")
            session.delete(supplier)
        self.logger.info(f"Fournisseur supprimé: {supplier_id}")
        return {"id": supplier_id, "deleted": True}


class StorageLocationHandlers:
    """Emplacements de stockage"""

    def __init__(self, db: DatabaseManager):
        self.db = db
        self.logger = LoggerFactory.get_logger("dental.storage_locations")

    def register(self, registry: MessageHandlerRegistry) -> None:
        registry.register(StorageLocationOperation.CREATE, self.create)
        registry.register(StorageLocationOperation.FIND_ALL, self.find_all)
        registry.register(StorageLocationOperation.FIND_ONE, self.find_one)
        registry.register(StorageLocationOperation.UPDATE, self.update)
        registry.register(StorageLocationOperation.DELETE, self.delete)
        registry.register(StorageLocationOperation.MERGE, self.merge)

    def _get(self, session, location_id: str, label: str = "Storage location") -> StorageLocation:
        location = session.get(StorageLocation, location_id)
        if location is None:
            self.logger.warning(f"Emplacement introuvable: {location_id}")
            raise NotFoundError(f"{label} with ID {location_id} not found")
        return location

    def create(self, payload: Any) -> Dict[str, Any]:
        dto = parse_model(StorageLocationCreate, payload)
        with self.db.session_scope() as session:
            location = StorageLocation(**dto.model_dump())
            session.add(location)
            session.flush()
            session.refresh(location)
            self.logger.info(f"Emplacement créé: {location.location_name}")
            return location.to_dict()

    def find_all(self, payload: Any) -> List[Dict[str, Any]]:
        with self.db.session_scope() as session:
            locations = session.query(StorageLocation).order_by(StorageLocation.location_name).all()
            return [location.to_dict() for location in locations]

    def find_one(self, payload: Any) -> Dict[str, Any]:
        with self.db.session_scope() as session:
            return self._get(session, require_id(payload)).to_dict()

    def update(self, payload: Any) -> Dict[str, Any]:
        location_id = require_id(payload)
        dto = parse_model(StorageLocationUpdate, require_field(payload, "data"))
        with self.db.session_scope() as session:
            location = self._get(session, location_id)
            _apply(location, dto.model_dump(exclude_unset=True))
            session.flush()
            session.refresh(location)
            return location.to_dict()

    def delete(self, payload: Any) -> Dict[str, Any]:
        location_id = require_id(payload)
        with self.db.session_scope() as session:
            location = self._get(session, location_id)
            if session.query(Lot).filter(Lot.storage_location_id == location_id).count():
                raise ConflictError(f"Storage location with ID {location_id} still holds lots")
            session.delete(location)
        return {"id": location_id, "deleted": True}

    def merge(self, payload: Any) -> Dict[str, Any]:
        """Déplacer les lots de la source vers la cible puis expirer la source"""
        dto = parse_model(StorageLocationMerge, payload)
        with self.db.session_scope() as session:
            source = self._get(session, dto.source_id, "Source storage location")
            target = self._get(session, dto.target_id, "Target storage location")
            if target.status == StorageLocationStatus.EXPIRED.value:
                raise PayloadValidationError(f"Target storage location {target.id} is expired")

            moved = (
                session.query(Lot)
                .filter(Lot.storage_location_id == source.id)
                .update({Lot.storage_location_id: target.id}, synchronize_session=False)
            )
            source.status = StorageLocationStatus.EXPIRED.value
            self.logger.info(f"Emplacement {source.id} fusionné dans {target.id} ({moved} lots)")
            return {"sourceId": source.id, "targetId": target.id, "movedLots": moved}


class InventoryItemHandlers:
    """Articles d'inventaire et stock courant"""

    def __init__(self, db: DatabaseManager):
        self.db = db
        self.logger = LoggerFactory.get_logger("dental.inventory_items")

    def register(self, registry: MessageHandlerRegistry) -> None:
        registry.register(InventoryItemOperation.CREATE, self.create)
        registry.register(InventoryItemOperation.FIND_ALL, self.find_all)
        registry.register(InventoryItemOperation.FIND_ONE, self.find_one)
        registry.register(InventoryItemOperation.UPDATE, self.update)
        registry.register(InventoryItemOperation.REMOVE, self.remove)
        registry.register(InventoryItemOperation.FIND_BY_CATEGORY, self.find_by_category)
        registry.register(InventoryItemOperation.FIND_CONSUMABLES, self.find_consumables)
        registry.register(InventoryItemOperation.FIND_REUSABLES, self.find_reusables)
        registry.register(InventoryItemOperation.SEARCH_BY_NAME, self.search_by_name)

    def _get(self, session, item_id: str) -> InventoryItem:
        item = session.get(InventoryItem, item_id)
        if item is None:
            raise NotFoundError(f"Inventory item with ID {item_id} not found")
        return item

    @staticmethod
    def _stock(session, item_id: str) -> int:
        total = session.query(func.sum(Lot.quantity)).filter(Lot.inventory_item_id == item_id).scalar()
        return int(total or 0)

    def _list(self, *criteria) -> List[Dict[str, Any]]:
        with self.db.session_scope() as session:
            query = session.query(InventoryItem)
            for criterion in criteria:
                query = query.filter(criterion)
            items = query.order_by(InventoryItem.name).all()

            stock = dict(
                session.query(Lot.inventory_item_id, func.sum(Lot.quantity))
                .filter(Lot.inventory_item_id.in_([item.id for item in items]))
                .group_by(Lot.inventory_item_id)
                .all()
            )
            return [item.to_dict(int(stock.get(item.id) or 0)) for item in items]

    def create(self, payload: Any) -> Dict[str, Any]:
        dto = parse_model(InventoryItemCreate, payload)
        with self.db.session_scope() as session:
            item = InventoryItem(**dto.model_dump())
            session.add(item)
            session.flush()
            session.refresh(item)
            self.logger.info(f"Article créé: {item.name} ({item.id})")
            return item.to_dict()

    def find_all(self, payload: Any) -> List[Dict[str, Any]]:
        return self._list()

    def find_one(self, payload: Any) -> Dict[str, Any]:
        with self.db.session_scope() as session:
            item = self._get(session, require_id(payload))
            return item.to_dict(self._stock(session, item.id))

    def update(self, payload: Any) -> Dict[str, Any]:
        item_id = require_id(payload)
        dto = parse_model(InventoryItemUpdate, require_field(payload, "data"))
        with self.db.session_scope() as session:
            item = self._get(session, item_id)
            _apply(item, dto.model_dump(exclude_unset=True))
            session.flush()
            session.refresh(item)
            return item.to_dict(self._stock(session, item.id))

    def remove(self, payload: Any) -> Dict[str, Any]:
        item_id = require_id(payload)
        with self.db.session_scope() as session:
            item = self._get(session, item_id)
            if session.query(Transaction).filter(Transaction.inventory_item_id == item_id).count():
                raise ConflictError(f"Inventory item with ID {item_id} has transactions")
            session.delete(item)
        return {"id": item_id, "deleted": True}

    def find_by_category(self, payload: Any) -> List[Dict[str, Any]]:
        category = _allowed(require_field(payload, "category"), InventoryItemCategory, "category")
        return self._list(InventoryItem.category == category)

    def find_consumables(self, payload: Any) -> List[Dict[str, Any]]:
        return self._list(InventoryItem.is_consumable.is_(True))

    def find_reusables(self, payload: Any) -> List[Dict[str, Any]]:
        return self._list(InventoryItem.is_reusable.is_(True))

    def search_by_name(self, payload: Any) -> List[Dict[str, Any]]:
        term = str(require_field(payload, "searchTerm"))
        return self._list(InventoryItem.name.ilike(f"%{term}%"))


class TransactionHandlers:
    """Mouvements de stock"""

    def __init__(self, db: DatabaseManager):
        self.db = db
        self.logger = LoggerFactory.get_logger("dental.transactions")

    def register(self, registry: MessageHandlerRegistry) -> None:
        registry.register(TransactionOperation.CREATE, self.create)
        registry.register(TransactionOperation.FIND_ALL, self.find_all)
        registry.register(TransactionOperation.FIND_ONE, self.find_one)
        registry.register(TransactionOperation.UPDATE, self.update)
        registry.register(TransactionOperation.REMOVE, self.remove)
        registry.register(TransactionOperation.FIND_BY_TYPE, self.find_by_type)
        registry.register(TransactionOperation.FIND_BY_INVENTORY_ITEM, self.find_by_inventory_item)
        registry.register(TransactionOperation.GET_TOTAL_QUANTITY, self.get_total_quantity)

    def _get(self, session, transaction_id: str) -> Transaction:
        transaction = session.get(Transaction, transaction_id)
        if transaction is None:
            raise NotFoundError(f"Transaction with ID {transaction_id} not found")
        return transaction

    def _list(self, *criteria) -> List[Dict[str, Any]]:
        with self.db.session_scope() as session:
            query = session.query(Transaction)
            for criterion in criteria:
                query = query.filter(criterion)
            transactions = query.order_by(Transaction.date, Transaction.created_at).all()
            return [transaction.to_dict() for transaction in transactions]

    def create(self, payload: Any) -> Dict[str, Any]:
        dto = parse_model(TransactionCreate, payload)
        self.logger.info(f"Mouvement {dto.type} pour l'article {dto.inventory_item_id}")

        with self.db.session_scope() as session:
            if session.get(InventoryItem, dto.inventory_item_id) is None:
                raise NotFoundError(f"Inventory item with ID {dto.inventory_item_id} not found")

            transaction = Transaction(**dto.model_dump())
            session.add(transaction)

            # Une sortie de stock date la dernière utilisation des lots de l'article
            if dto.type == TransactionType.OUT.value:
                session.query(Lot).filter(Lot.inventory_item_id == dto.inventory_item_id).update(
                    {Lot.last_used_date: dto.date}, synchronize_session=False
                )

            session.flush()
            session.refresh(transaction)
            return transaction.to_dict()

    def find_all(self, payload: Any) -> List[Dict[str, Any]]:
        return self._list()

    def find_one(self, payload: Any) -> Dict[str, Any]:
        with self.db.session_scope() as session:
            return self._get(session, require_id(payload)).to_dict()

    def update(self, payload: Any) -> Dict[str, Any]:
        transaction_id = require_id(payload)
        dto = parse_model(TransactionUpdate, require_field(payload, "data"))
        with self.db.session_scope() as session:
            transaction = self._get(session, transaction_id)
            _apply(transaction, dto.model_dump(exclude_unset=True))
            session.flush()
            session.refresh(transaction)
            return transaction.to_dict()

    def remove(self, payload: Any) -> Dict[str, Any]:
        transaction_id = require_id(payload)
        with self.db.session_scope() as session:
            session.delete(self._get(session, transaction_id))
        return {"id": transaction_id, "deleted": True}

    def find_by_type(self, payload: Any) -> List[Dict[str, Any]]:
        transaction_type = _allowed(require_field(payload, "type"), TransactionType, "type")
        return self._list(Transaction.type == transaction_type)

    def find_by_inventory_item(self, payload: Any) -> List[Dict[str, Any]]:
        return self._list(Transaction.inventory_item_id == require_field(payload, "inventoryItemId"))

    def get_total_quantity(self, payload: Any) -> Dict[str, Any]:
        """
        Quantité calculée à partir des mouvements, dans l'ordre chronologique.

        Entrées et retours ajoutent, sorties retirent ; un ajustement fixe
        la quantité à sa valeur.
        """
        item_id = str(require_field(payload, "inventoryItemId"))
        with self.db.session_scope() as session:
            if session.get(InventoryItem, item_id) is None:
                raise NotFoundError(f"Inventory item with ID {item_id} not found")
            transactions = (
                session.query(Transaction)
                .filter(Transaction.inventory_item_id == item_id)
                .order_by(Transaction.date, Transaction.created_at)
                .all()
            )

            total = 0.0
            for transaction in transactions:
                quantity = float(transaction.quantity)
                if transaction.type in (TransactionType.IN.value, TransactionType.RETURN.value):
                    total += quantity
                elif transaction.type == TransactionType.OUT.value:
                    total -= quantity
                elif transaction.type == TransactionType.ADJUSTMENT.value:
                    total = quantity
        return {"inventoryItemId": item_id, "totalQuantity": total}


def register_inventory(db: DatabaseManager, registry: MessageHandlerRegistry) -> None:
    """Enregistrer les handlers d'inventaire hors lots"""
    SupplierHandlers(db).register(registry)
    StorageLocationHandlers(db).register(registry)
    InventoryItemHandlers(db).register(registry)
    TransactionHandlers(db).register(registry)
