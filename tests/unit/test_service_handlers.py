"""Tests unitaires pour les handlers des services Auth et Notification"""

import pytest
from fastapi.testclient import TestClient

from viewr.auth.handlers import PlanHandlers, build_registry as build_auth_registry
from viewr.auth.app import create_auth_app
from viewr.dental.app import create_dental_app
from viewr.notification.handlers import NotificationHandlers, build_registry as build_notification_registry
from viewr.notification.models import EstablishmentMember, Notification
from viewr.shared.errors import NotFoundError, PayloadValidationError
from viewr.shared.operations import (
    AUTH_OPERATIONS, NOTIFICATION_OPERATIONS, HealthOperation, operation_values
)


@pytest.mark.unit
class TestPlanHandlers:
    """Tests des plans d'abonnement"""

    @pytest.fixture
    def plans(self, auth_db):
        return PlanHandlers(auth_db)

    def test_create_plan(self, plans):
        """Test de création d'un plan"""
        plan = plans.create({"name": "  Premium  ", "price": 99.5})

        assert plan["name"] == "Premium"
        assert plan["price"] == 99.5
        assert plan["isActive"] is True

    def test_invalid_price(self, plans):
        """Test d'un prix invalide"""
        with pytest.raises(PayloadValidationError):
            plans.create({"name": "Free", "price": 0})

    def test_find_all_ordered_by_price(self, plans):
        """Test du tri par prix"""
        plans.create({"name": "Pro", "price": 50})
        plans.create({"name": "Basic", "price": 10})

        assert [p["name"] for p in plans.find_all({})] == ["Basic", "Pro"]

    def test_remove_is_soft_delete(self, plans, auth_db):
        """Test de la désactivation d'un plan"""
        plan = plans.create({"name": "Pro", "price": 50})

        assert plans.remove({"id": plan["id"]}) == {"id": plan["id"], "deleted": True}
        assert plans.find_all({}) == []
        with pytest.raises(NotFoundError):
            plans.find_one({"id": plan["id"]})
        with pytest.raises(NotFoundError):
            plans.remove({"id": plan["id"]})

    def test_update_plan(self, plans):
        """Test de mise à jour d'un plan"""
        plan = plans.create({"name": "Pro", "price": 50})

        updated = plans.update({"id": plan["id"], "data": {"price": 60}})

        assert updated["price"] == 60
        assert updated["name"] == "Pro"

    def test_update_rejects_unknown_field(self, plans):
        """Test d'un champ inconnu"""
        plan = plans.create({"name": "Pro", "price": 50})

        with pytest.raises(PayloadValidationError):
            plans.update({"id": plan["id"], "data": {"colour": "gold"}})


@pytest.mark.unit
class TestNotificationHandlers:
    """Tests du stockage des notifications"""

    @pytest.fixture
    def notifications(self, notification_db):
        return NotificationHandlers(notification_db)

    def test_store_broadcast(self, notifications, notification_db):
        """Test d'une notification à tout l'établissement"""
        result = notifications.store({
            "type": "ALL",
            "message": "Cabinet fermé lundi",
            "establishmentId": "est-1",
            "sentBy": "admin"
        })

        assert result == {"success": True, "message": "Notification stored"}
        with notification_db.session_scope() as session:
            stored = session.query(Notification).one()
            assert stored.establishment_id == "est-1"
            assert stored.user_id is None

    def test_user_notification_requires_user(self, notifications):
        """Test d'une notification USER sans destinataire"""
        with pytest.raises(PayloadValidationError):
            notifications.store({
                "type": "USER",
                "message": "Rappel",
                "establishmentId": "est-1",
                "sentBy": "admin"
            })

    def test_verify_user_establishment(self, notifications, notification_db):
        """Test du rattachement d'un utilisateur à son établissement"""
        with notification_db.session_scope() as session:
            session.add(EstablishmentMember(user_id="user-1", establishment_id="est-1"))

        assert notifications.verify_user_establishment({"userId": "user-1", "establishmentId": "est-1"}) == {
            "valid": True
        }
        assert notifications.verify_user_establishment({"userId": "user-1", "establishmentId": "est-2"}) == {
            "valid": False
        }
        assert notifications.verify_user_establishment({"userId": "ghost", "establishmentId": "est-1"}) == {
            "valid": False
        }

    def test_verify_requires_both_ids(self, notifications):
        with pytest.raises(PayloadValidationError):
            notifications.verify_user_establishment({"userId": "user-1"})


@pytest.mark.unit
class TestRegistries:
    """Tests des tables d'opérations"""

    def test_auth_registry(self, auth_db):
        registry = build_auth_registry(auth_db)
        expected = set(operation_values(AUTH_OPERATIONS)) - {HealthOperation.CHECK.value}

        assert expected == set(registry.operations())

    def test_notification_registry(self, notification_db):
        registry = build_notification_registry(notification_db)
        expected = set(operation_values(NOTIFICATION_OPERATIONS)) - {HealthOperation.CHECK.value}

        assert expected == set(registry.operations())


@pytest.mark.unit
class TestServiceApps:
    """Tests des applications FastAPI des microservices"""

    def test_dental_app_supervision(self):
        """Test des endpoints de supervision du service Dental"""
        with TestClient(create_dental_app(start_consumer=False)) as client:
            health = client.get("/health").json()
            operations = client.get("/operations").json()
            root = client.get("/").json()

        assert health["status"] == "healthy"
        assert health["checks"]["database"]["status"] == "healthy"
        assert "rabbitmq" not in health["checks"]
        assert operations["queue"] == "dental_queue"
        assert "lot.create" in operations["operations"]
        assert "health.check" in operations["operations"]
        assert root["queue"] == "dental_queue"

    def test_auth_app_operations(self):
        """Test de la liste des opérations du service Auth"""
        with TestClient(create_auth_app(start_consumer=False)) as client:
            operations = client.get("/operations").json()

        assert operations["operations"] == sorted(operation_values(AUTH_OPERATIONS))
