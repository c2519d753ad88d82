"""
Application FastAPI pour le service Notification
"""

from ..shared.config import get_notification_config
from ..shared.service import create_service_app

from .handlers import build_registry
from .models import Base


def create_notification_app(start_consumer: bool = True):
    """Créer l'application du service Notification"""
    config = get_notification_config()
    return create_service_app(
        config,
        Base,
        build_registry,
        queue_name=config.rabbitmq.notification_queue,
        title="Viewr Notification Service",
        description="Stockage des notifications diffusées aux établissements",
        start_consumer=start_consumer
    )


# Point d'entrée pour développement
if __name__ == "__main__":
    import uvicorn

    config = get_notification_config()
    uvicorn.run(
        create_notification_app(),
        host="0.0.0.0",
        port=config.service_port,
        log_level=config.monitoring.log_level.lower()
    )
