"""
Modèles SQLAlchemy du service Notification
"""

from datetime import datetime, timezone
from typing import Any, Dict
import uuid

from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.orm import declarative_base


Base = declarative_base()


class Notification(Base):
    """Notification diffusée à un établissement ou à un utilisateur"""

    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    type = Column(String(10), nullable=False)
    message = Column(Text, nullable=False)
    establishment_id = Column(String(100), nullable=False, index=True)
    user_id = Column(String(100), index=True)
    sent_by = Column(String(100), nullable=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "message": self.message,
            "establishmentId": self.establishment_id,
            "userId": self.user_id,
            "sentBy": self.sent_by,
            "createdAt": self.created_at.isoformat() if self.created_at else None
        }


class EstablishmentMember(Base):
    """Rattachement d'un utilisateur à son établissement"""

    __tablename__ = "establishment_members"

    user_id = Column(String(100), primary_key=True)
    establishment_id = Column(String(100), nullable=False, index=True)
