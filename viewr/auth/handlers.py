"""
Handlers du service Auth : plans d'abonnement

Une suppression désactive le plan ; les plans inactifs ne sont plus
visibles par les opérations de lecture.
"""

from typing import Any, Dict, List

from ..shared.consumer import MessageHandlerRegistry
from ..shared.database import DatabaseManager
from ..shared.dto import PlanCreate, PlanUpdate
from ..shared.errors import NotFoundError
from ..shared.operations import PlanOperation
from ..shared.payloads import parse_model, require_field, require_id
from ..shared.utils import LoggerFactory

from .models import Plan


class PlanHandlers:
    """CRUD des plans"""

    def __init__(self, db: DatabaseManager):
        self.db = db
        self.logger = LoggerFactory.get_logger("auth.plans")

    def register(self, registry: MessageHandlerRegistry) -> None:
        registry.register(PlanOperation.CREATE, self.create)
        registry.register(PlanOperation.FIND_ALL, self.find_all)
        registry.register(PlanOperation.FIND_ONE, self.find_one)
        registry.register(PlanOperation.UPDATE, self.update)
        registry.register(PlanOperation.REMOVE, self.remove)

    def _get_active(self, session, plan_id: str) -> Plan:
        plan = session.query(Plan).filter(Plan.id == plan_id, Plan.is_active.is_(True)).first()
        if plan is None:
            raise NotFoundError(f"Plan with ID {plan_id} not found")
        return plan

    def create(self, payload: Any) -> Dict[str, Any]:
        dto = parse_model(PlanCreate, payload)
        with self.db.session_scope() as session:
            plan = Plan(**dto.model_dump())
            session.add(plan)
            session.flush()
            session.refresh(plan)
            self.logger.info(f"Plan créé: {plan.id} ({plan.name})")
            return plan.to_dict()

    def find_all(self, payload: Any) -> List[Dict[str, Any]]:
        with self.db.session_scope() as session:
            plans = session.query(Plan).filter(Plan.is_active.is_(True)).order_by(Plan.price).all()
            return [plan.to_dict() for plan in plans]

    def find_one(self, payload: Any) -> Dict[str, Any]:
        with self.db.session_scope() as session:
            return self._get_active(session, require_id(payload)).to_dict()

    def update(self, payload: Any) -> Dict[str, Any]:
        plan_id = require_id(payload)
        dto = parse_model(PlanUpdate, require_field(payload, "data"))
        with self.db.session_scope() as session:
            plan = self._get_active(session, plan_id)
            for key, value in dto.model_dump(exclude_unset=True).items():
                setattr(plan, key, value)
            session.flush()
            session.refresh(plan)
            return plan.to_dict()

    def remove(self, payload: Any) -> Dict[str, Any]:
        plan_id = require_id(payload)
        with self.db.session_scope() as session:
            self._get_active(session, plan_id).is_active = False
        self.logger.info(f"Plan désactivé: {plan_id}")
        return {"id": plan_id, "deleted": True}


def build_registry(db: DatabaseManager) -> MessageHandlerRegistry:
    """Table complète des opérations du service Auth"""
    registry = MessageHandlerRegistry()
    PlanHandlers(db).register(registry)
    return registry
