"""
Utilitaires partagés pour la passerelle et les microservices Viewr
"""

import logging
import logging.config
import json
import asyncio
from typing import Dict, Any, Callable
from datetime import datetime, date, timezone
from decimal import Decimal
from pathlib import Path
from uuid import UUID


class LoggerFactory:
    """Factory pour créer des loggers configurés"""

    _configured = False

    @classmethod
    def configure(
        cls,
        log_level: str = "INFO",
        log_format: str = "json",
        log_dir: str = "logs",
        log_file: str = "app.log",
        force: bool = False
    ) -> None:
        """Configurer le système de logging"""
        if cls._configured and not force:
            return

        if log_format == "json":
            formatter_config = {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s %(pathname)s %(lineno)d"
            }
        else:
            formatter_config = {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }

        # Créer le répertoire de logs
        Path(log_dir).mkdir(parents=True, exist_ok=True)

        config = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": formatter_config
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": log_level,
                    "formatter": "default",
                    "stream": "ext://sys.stdout"
                },
                "file": {
                    "class": "logging.handlers.RotatingFileHandler",
                    "level": log_level,
                    "formatter": "default",
                    "filename": str(Path(log_dir) / log_file),
                    "maxBytes": 10485760,  # 10MB
                    "backupCount": 5,
                    "encoding": "utf-8"
                }
            },
            "loggers": {
                "": {
                    "level": log_level,
                    "handlers": ["console", "file"],
                    "propagate": False
                }
            }
        }

        logging.config.dictConfig(config)
        cls._configured = True

    @classmethod
    def configure_from(cls, config, force: bool = False) -> None:
        """Configurer depuis un ServiceConfig"""
        cls.configure(
            log_level=config.monitoring.log_level,
            log_format=config.monitoring.log_format,
            log_dir=config.monitoring.log_dir,
            log_file=f"{config.service_name}.log",
            force=force
        )

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Obtenir un logger configuré"""
        if not cls._configured:
            cls.configure()
        return logging.getLogger(name)


class HealthChecker:
    """Utilitaire pour vérifier la santé des services"""

    def __init__(self, service_name: str):
        self.service_name = service_name
        self.logger = LoggerFactory.get_logger(f"{service_name}.health")
        self.checks: Dict[str, Callable[[], Any]] = {}

    def add_check(self, name: str, check_func: Callable[[], Any]) -> None:
        """Ajouter une vérification de santé"""
        self.checks[name] = check_func

    async def run_checks(self) -> Dict[str, Any]:
        """Exécuter toutes les vérifications de santé"""
        results = {
            "service": self.service_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "status": "healthy",
            "checks": {}
        }

        overall_healthy = True

        for check_name, check_func in self.checks.items():
            try:
                check_result = check_func()
                if asyncio.iscoroutine(check_result):
                    check_result = await check_result

                results["checks"][check_name] = {
                    "status": "healthy" if check_result else "unhealthy",
                    "details": check_result if isinstance(check_result, dict) else {}
                }

                if not check_result:
                    overall_healthy = False

            except Exception as e:
                self.logger.error(f"Health check {check_name} failed: {e}")
                results["checks"][check_name] = {
                    "status": "error",
                    "error": str(e)
                }
                overall_healthy = False

        results["status"] = "healthy" if overall_healthy else "unhealthy"
        return results


REDACTED = "[REDACTED]"
SENSITIVE_MARKERS = ("password", "token", "secret", "authorization")
SENSITIVE_KEYS = {"cin", "insuranceid", "insurance_id"}


def redact_payload(value: Any, depth: int = 0) -> Any:
    """Copie d'une structure JSON dont les champs sensibles sont masqués"""
    if depth > 10:
        return REDACTED
    if isinstance(value, dict):
        redacted = {}
        for key, item in value.items():
            lowered = str(key).lower()
            if lowered in SENSITIVE_KEYS or any(marker in lowered for marker in SENSITIVE_MARKERS):
                redacted[key] = REDACTED
            else:
                redacted[key] = redact_payload(item, depth + 1)
        return redacted
    if isinstance(value, (list, tuple)):
        return [redact_payload(item, depth + 1) for item in value]
    return value


def truncate_string(text: str, max_length: int, suffix: str = "...") -> str:
    """Tronquer une chaîne si elle est trop longue"""
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


def json_default(obj: Any) -> Any:
    """Sérialiseur pour les types non natifs JSON"""
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, Decimal):
        return float(obj)
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def safe_json_dumps(obj: Any, **kwargs) -> str:
    """JSON dumps qui gère les dates, UUID, Decimal et modèles pydantic"""
    return json.dumps(obj, default=json_default, ensure_ascii=False, **kwargs)

