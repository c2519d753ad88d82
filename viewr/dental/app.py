"""
Application FastAPI pour le service Dental
"""

from ..shared.config import get_dental_config
from ..shared.service import create_service_app

from .handlers import build_registry
from .models import Base


def create_dental_app(start_consumer: bool = True):
    """Créer l'application du service Dental"""
    config = get_dental_config()
    return create_service_app(
        config,
        Base,
        build_registry,
        queue_name=config.rabbitmq.dental_queue,
        title="Viewr Dental Service",
        description="Inventaire, patients, rendez-vous et tâches du cabinet dentaire",
        start_consumer=start_consumer
    )


# Point d'entrée pour développement
if __name__ == "__main__":
    import uvicorn

    config = get_dental_config()
    uvicorn.run(
        create_dental_app(),
        host="0.0.0.0",
        port=config.service_port,
        log_level=config.monitoring.log_level.lower()
    )
