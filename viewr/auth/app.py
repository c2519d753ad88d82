"""
Application FastAPI pour le service Auth
"""

from ..shared.config import get_auth_config
from ..shared.service import create_service_app

from .handlers import build_registry
from .models import Base


def create_auth_app(start_consumer: bool = True):
    """Créer l'application du service Auth"""
    config = get_auth_config()
    return create_service_app(
        config,
        Base,
        build_registry,
        queue_name=config.rabbitmq.auth_queue,
        title="Viewr Auth Service",
        description="Plans d'abonnement des établissements",
        start_consumer=start_consumer
    )


# Point d'entrée pour développement
if __name__ == "__main__":
    import uvicorn

    config = get_auth_config()
    uvicorn.run(
        create_auth_app(),
        host="0.0.0.0",
        port=config.service_port,
        log_level=config.monitoring.log_level.lower()
    )
