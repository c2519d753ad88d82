"""
Application FastAPI commune aux microservices

Le microservice consomme sa file RabbitMQ pendant toute la durée de vie de
l'application ; FastAPI n'expose que les endpoints de supervision.
"""

from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI

from .config import ServiceConfig
from .consumer import MessageHandlerRegistry, MicroserviceConsumer
from .database import DatabaseManager, ensure_sqlite_directory
from .middleware import CommonMiddleware
from .utils import LoggerFactory, HealthChecker


RegistryFactory = Callable[[DatabaseManager], MessageHandlerRegistry]


def create_service_app(
    config: ServiceConfig,
    base,
    build_registry: RegistryFactory,
    queue_name: str,
    title: str,
    description: str = "",
    start_consumer: bool = True
) -> FastAPI:
    """Créer l'application d'un microservice"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Gestionnaire de cycle de vie de l'application"""
        LoggerFactory.configure_from(config)
        logger = LoggerFactory.get_logger(f"{config.service_name}_service")
        logger.info(f"🚀 Démarrage du service {config.service_name}")

        # Base de données
        ensure_sqlite_directory(config.get_database_url())
        db = DatabaseManager(config.get_database_url(), base=base, echo=config.database.echo)
        db.initialize()
        app.state.db = db

        # Handlers et consommateur
        registry = build_registry(db)
        consumer = MicroserviceConsumer(
            config.service_name,
            queue_name,
            registry,
            config.get_rabbitmq_url(),
            prefetch_count=config.rabbitmq.prefetch_count
        )
        app.state.registry = registry
        app.state.consumer = consumer
        if start_consumer:
            await consumer.start()

        # Health Checker
        health_checker = HealthChecker(f"{config.service_name}_service")
        health_checker.add_check("database", db.ping)
        if start_consumer:
            health_checker.add_check("rabbitmq", lambda: consumer.is_connected)
        app.state.health_checker = health_checker

        logger.info(f"✅ Service {config.service_name} démarré ({len(registry)} opérations)")

        yield

        logger.info(f"🛑 Arrêt du service {config.service_name}")
        await consumer.stop()
        db.close()

    app = FastAPI(
        title=title,
        description=description,
        version="1.0.0",
        lifespan=lifespan
    )

    CommonMiddleware.setup_middleware(app, config)

    @app.get("/")
    async def root():
        return {
            "service": title,
            "queue": queue_name,
            "version": "1.0.0",
            "status": "running"
        }

    @app.get("/health")
    async def health_check():
        """Endpoint de vérification de santé détaillé"""
        return await app.state.health_checker.run_checks()

    @app.get("/operations")
    async def list_operations():
        """Opérations servies par ce microservice"""
        return {"queue": queue_name, "operations": app.state.registry.operations()}

    return app
