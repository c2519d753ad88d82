"""
Application FastAPI pour la passerelle HTTP -> RabbitMQ
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..shared.broker import BrokerClientPool, ConnectionFactory, RequestDispatcher
from ..shared.config import ServiceConfig, get_gateway_config
from ..shared.errors import GatewayError
from ..shared.middleware import CommonMiddleware
from ..shared.utils import LoggerFactory, HealthChecker

from .routes import ROUTERS


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(messages) or "Invalid request"


def create_gateway_app(
    config: Optional[ServiceConfig] = None,
    connection_factory: Optional[ConnectionFactory] = None
) -> FastAPI:
    """Créer l'application FastAPI de la passerelle"""

    config = config or get_gateway_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Gestionnaire de cycle de vie de l'application"""
        LoggerFactory.configure_from(config)
        logger = LoggerFactory.get_logger("gateway")
        logger.info("🚀 Démarrage de la passerelle")

        pool = BrokerClientPool(
            config.get_rabbitmq_url(),
            connection_factory=connection_factory,
            connect_timeout_ms=config.rabbitmq.dispatch_timeout_ms
        )
        dispatcher = RequestDispatcher(pool, default_timeout_ms=config.rabbitmq.dispatch_timeout_ms)
        app.state.pool = pool
        app.state.dispatcher = dispatcher

        health_checker = HealthChecker("gateway")
        health_checker.add_check(
            "broker_pool",
            lambda: {"clients": len(pool), "route_keys": pool.route_keys()}
        )
        app.state.health_checker = health_checker

        logger.info(f"✅ Passerelle démarrée (timeout {config.rabbitmq.dispatch_timeout_ms} ms)")

        yield

        logger.info("🛑 Arrêt de la passerelle")
        await pool.close_all()

    app = FastAPI(
        title="Viewr Backend API",
        description="Passerelle HTTP vers les microservices via RabbitMQ (en-tête x-target-queue)",
        version="1.0.0",
        lifespan=lifespan
    )

    CommonMiddleware.setup_middleware(app, config)

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        error = GatewayError(400, "Bad Request", _validation_message(exc))
        return JSONResponse(status_code=400, content=error.to_dict())

    for router in ROUTERS:
        app.include_router(router)

    @app.get("/")
    async def root():
        return {
            "service": "Viewr Backend API",
            "version": "1.0.0",
            "status": "running",
            "routing_header": config.gateway.target_queue_header
        }

    @app.get("/health")
    async def health_check():
        """Endpoint de vérification de santé (sans en-tête de file)"""
        return await app.state.health_checker.run_checks()

    return app


# Point d'entrée pour développement
if __name__ == "__main__":
    import uvicorn

    config = get_gateway_config()
    uvicorn.run(
        create_gateway_app(config),
        host="0.0.0.0",
        port=config.service_port,
        log_level=config.monitoring.log_level.lower()
    )
