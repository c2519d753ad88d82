"""
Middleware communs pour la passerelle et les microservices Viewr
"""

import time
import uuid
from typing import Callable
from datetime import datetime, timezone

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from .config import ServiceConfig
from .utils import LoggerFactory


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware pour logger toutes les requêtes"""

    def __init__(self, app: FastAPI, logger_name: str = "requests", queue_header: str = "x-target-queue"):
        super().__init__(app)
        self.logger = LoggerFactory.get_logger(logger_name)
        self.queue_header = queue_header

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start_time = time.time()

        request.state.request_id = request_id

        self.logger.info(
            "Request started",
            extra={
                "request_id": request_id,
                "method": request.method,
                "url": str(request.url),
                "target_queue": request.headers.get(self.queue_header),
                "client_ip": request.client.host if request.client else None,
                "user_agent": request.headers.get("user-agent")
            }
        )

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            self.logger.error(
                "Request failed",
                extra={
                    "request_id": request_id,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "process_time": round(process_time, 4)
                },
                exc_info=True
            )
            return JSONResponse(
                status_code=500,
                content={
                    "statusCode": 500,
                    "error": "Internal Server Error",
                    "message": "Unexpected gateway failure",
                    "requestId": request_id,
                    "timestamp": datetime.now(timezone.utc).isoformat()
                },
                headers={"X-Request-ID": request_id}
            )

        process_time = time.time() - start_time
        self.logger.info(
            "Request completed",
            extra={
                "request_id": request_id,
                "status_code": response.status_code,
                "process_time": round(process_time, 4),
                "response_size": response.headers.get("content-length", 0)
            }
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(round(process_time, 4))
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware pour ajouter des headers de sécurité"""

    SECURITY_HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Permissions-Policy": "geolocation=(), microphone=(), camera=()"
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for header, value in self.SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response


class CommonMiddleware:
    """Classe utilitaire pour configurer tous les middlewares"""

    @staticmethod
    def setup_middleware(app: FastAPI, config: ServiceConfig, version: str = "1.0.0") -> None:
        """Configurer tous les middlewares pour une app FastAPI"""

        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.gateway.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        app.add_middleware(GZipMiddleware, minimum_size=1000)

        app.add_middleware(SecurityHeadersMiddleware)
        app.add_middleware(
            RequestLoggingMiddleware,
            logger_name=f"{config.service_name}.requests",
            queue_header=config.gateway.target_queue_header
        )

        app.state.service_name = config.service_name
        app.state.service_version = version
        app.state.config = config

        # Endpoint de configuration (en développement seulement)
        if config.is_development():
            @app.get("/debug/config", include_in_schema=False)
            async def get_config():
                """Configuration courante, identifiants masqués"""
                return config.to_dict()
