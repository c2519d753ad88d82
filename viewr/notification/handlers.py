"""
Handlers du service Notification
"""

from typing import Any, Dict

from ..shared.consumer import MessageHandlerRegistry
from ..shared.database import DatabaseManager
from ..shared.dto import NotificationCreate, UserEstablishmentCheck
from ..shared.operations import NotificationOperation
from ..shared.payloads import parse_model
from ..shared.utils import LoggerFactory

from .models import EstablishmentMember, Notification


class NotificationHandlers:
    """Enregistrement des notifications par établissement"""

    def __init__(self, db: DatabaseManager):
        self.db = db
        self.logger = LoggerFactory.get_logger("notification.store")

    def register(self, registry: MessageHandlerRegistry) -> None:
        registry.register(NotificationOperation.STORE, self.store)
        registry.register(NotificationOperation.VERIFY_USER_ESTABLISHMENT, self.verify_user_establishment)

    def store(self, payload: Any) -> Dict[str, Any]:
        dto = parse_model(NotificationCreate, payload)
        with self.db.session_scope() as session:
            notification = Notification(**dto.model_dump())
            session.add(notification)
            session.flush()
            self.logger.info(
                f"Notification {dto.type} enregistrée pour l'établissement {dto.establishment_id}",
                extra={"notification_id": notification.id}
            )
        return {"success": True, "message": "Notification stored"}

    def verify_user_establishment(self, payload: Any) -> Dict[str, bool]:
        """Un utilisateur inconnu n'appartient à aucun établissement"""
        dto = parse_model(UserEstablishmentCheck, payload)
        with self.db.session_scope() as session:
            member = session.get(EstablishmentMember, dto.user_id)
            valid = member is not None and member.establishment_id == dto.establishment_id
        if not valid:
            self.logger.warning(f"Utilisateur {dto.user_id} hors de l'établissement {dto.establishment_id}")
        return {"valid": valid}


def build_registry(db: DatabaseManager) -> MessageHandlerRegistry:
    """Table complète des opérations du service Notification"""
    registry = MessageHandlerRegistry()
    NotificationHandlers(db).register(registry)
    return registry
