"""
Configuration centralisée pour la passerelle et les microservices Viewr
"""

import os
import json
import logging
from typing import Any, Dict, Optional
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit
from enum import Enum

import yaml

from .errors import ConfigurationError


logger = logging.getLogger("config")


class Environment(Enum):
    """Environnements d'exécution"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


@dataclass
class DatabaseConfig:
    """Configuration base de données"""
    url: str = "sqlite:///./data/viewr.db"
    pool_size: int = 10
    echo: bool = False


@dataclass
class RabbitMQConfig:
    """Configuration RabbitMQ"""
    url: str = "amqp://localhost:5672"
    dispatch_timeout_ms: int = 30000
    dental_queue: str = "dental_queue"
    auth_queue: str = "auth_queue"
    notification_queue: str = "notification_queue"
    prefetch_count: int = 10


@dataclass
class GatewayConfig:
    """Configuration de la passerelle HTTP"""
    target_queue_header: str = "x-target-queue"
    allowed_origins: list = field(default_factory=lambda: ["*"])
    # Vide : toute file nommée par l'en-tête est acceptée
    allowed_queues: list = field(default_factory=list)


@dataclass
class MonitoringConfig:
    """Configuration monitoring"""
    log_level: str = "INFO"
    log_format: str = "json"
    log_dir: str = "logs"


@dataclass
class ServiceConfig:
    """Configuration complète d'un service"""
    service_name: str
    service_port: int
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    # Configurations des composants
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    rabbitmq: RabbitMQConfig = field(default_factory=RabbitMQConfig)
    gateway: GatewayConfig = field(default_factory=GatewayConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)

    # Configurations spécifiques
    custom_config: Dict[str, Any] = field(default_factory=dict)
    config_dir: str = "config"

    def __post_init__(self):
        """Charger la configuration : fichier puis variables d'environnement"""
        self._load_from_file()
        self._load_from_env()
        self._validate_config()

    def _load_from_env(self) -> None:
        """Charger depuis les variables d'environnement"""
        env_str = os.getenv("VIEWR_ENV", "development")
        try:
            self.environment = Environment(env_str)
        except ValueError:
            self.environment = Environment.DEVELOPMENT

        self.debug = os.getenv("DEBUG", "false").lower() == "true"

        # Database
        if db_url := os.getenv("DATABASE_URL"):
            self.database.url = db_url

        # RabbitMQ
        if rabbitmq_url := os.getenv("RABBITMQ_URL"):
            self.rabbitmq.url = rabbitmq_url

        if timeout := os.getenv("DISPATCH_TIMEOUT_MS"):
            try:
                self.rabbitmq.dispatch_timeout_ms = int(timeout)
            except ValueError:
                logger.warning(f"DISPATCH_TIMEOUT_MS invalide ignoré: {timeout}")

        if dental_queue := os.getenv("DENTAL_QUEUE"):
            self.rabbitmq.dental_queue = dental_queue

        if auth_queue := os.getenv("AUTH_QUEUE"):
            self.rabbitmq.auth_queue = auth_queue

        if notification_queue := os.getenv("NOTIFICATION_QUEUE"):
            self.rabbitmq.notification_queue = notification_queue

        # Gateway
        if header := os.getenv("TARGET_QUEUE_HEADER"):
            self.gateway.target_queue_header = header.lower()

        if allowed_queues := os.getenv("ALLOWED_QUEUES"):
            self.gateway.allowed_queues = [q.strip() for q in allowed_queues.split(",") if q.strip()]

        # Monitoring
        if log_level := os.getenv("LOG_LEVEL"):
            self.monitoring.log_level = log_level.upper()

        if log_format := os.getenv("LOG_FORMAT"):
            self.monitoring.log_format = log_format.lower()

        if log_dir := os.getenv("LOG_DIR"):
            self.monitoring.log_dir = log_dir

    def _load_from_file(self) -> None:
        """Charger depuis un fichier de configuration"""
        config_files = [
            f"{self.config_dir}/{self.service_name}.yaml",
            f"{self.config_dir}/{self.service_name}.yml",
            f"{self.config_dir}/{self.service_name}.json",
            f"{self.config_dir}/default.yaml",
            f"{self.config_dir}/default.yml"
        ]

        for config_file in config_files:
            config_path = Path(config_file)
            if config_path.exists():
                try:
                    with open(config_path, 'r', encoding='utf-8') as f:
                        if config_path.suffix in ['.yaml', '.yml']:
                            file_config = yaml.safe_load(f)
                        else:
                            file_config = json.load(f)
                except (OSError, ValueError, yaml.YAMLError) as e:
                    raise ConfigurationError(f"Erreur lecture config {config_file}: {e}") from e

                self._merge_config(file_config)
                logger.debug(f"Configuration chargée depuis {config_file}")
                break

    def _merge_config(self, file_config: Optional[Dict[str, Any]]) -> None:
        """Fusionner la configuration depuis un fichier"""
        if not file_config:
            return

        for section, values in file_config.items():
            if section == "custom_config" and isinstance(values, dict):
                self.custom_config.update(values)
            elif hasattr(self, section) and isinstance(values, dict):
                config_obj = getattr(self, section)
                for key, value in values.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)

    def _validate_config(self) -> None:
        """Valider la configuration"""
        if self.rabbitmq.dispatch_timeout_ms <= 0:
            raise ConfigurationError("dispatch_timeout_ms doit être strictement positif")

        if not self.gateway.target_queue_header:
            raise ConfigurationError("target_queue_header ne peut pas être vide")

        if self.environment == Environment.PRODUCTION:
            if self.debug:
                logger.warning("DEBUG activé en production")

            if "localhost" in self.rabbitmq.url:
                logger.warning("Broker RabbitMQ local en production")

            if self.database.url.startswith("sqlite"):
                logger.warning("Base de données SQLite en production")

    def get_database_url(self) -> str:
        """Obtenir l'URL de base de données"""
        return self.database.url

    def get_rabbitmq_url(self) -> str:
        """Obtenir l'URL RabbitMQ"""
        return self.rabbitmq.url

    def is_production(self) -> bool:
        """Vérifier si on est en production"""
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Vérifier si on est en développement"""
        return self.environment == Environment.DEVELOPMENT

    def to_dict(self) -> Dict[str, Any]:
        """Convertir en dictionnaire (identifiants masqués)"""
        return {
            "service_name": self.service_name,
            "service_port": self.service_port,
            "environment": self.environment.value,
            "debug": self.debug,
            "database": {
                "url": _mask_credentials(self.database.url),
                "pool_size": self.database.pool_size,
                "echo": self.database.echo
            },
            "rabbitmq": {
                "url": _mask_credentials(self.rabbitmq.url),
                "dispatch_timeout_ms": self.rabbitmq.dispatch_timeout_ms,
                "dental_queue": self.rabbitmq.dental_queue,
                "auth_queue": self.rabbitmq.auth_queue,
                "notification_queue": self.rabbitmq.notification_queue
            },
            "gateway": {
                "target_queue_header": self.gateway.target_queue_header,
                "allowed_queues": list(self.gateway.allowed_queues)
            },
            "monitoring": {
                "log_level": self.monitoring.log_level,
                "log_format": self.monitoring.log_format
            }
        }


def _mask_credentials(url: str) -> str:
    """Retirer le mot de passe d'une URL de connexion"""
    parts = urlsplit(url)
    if not parts.password:
        return url
    netloc = f"{parts.username}:***@{parts.hostname}"
    if parts.port:
        netloc += f":{parts.port}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


class ConfigManager:
    """Gestionnaire de configuration centralisé"""

    _configs: Dict[str, ServiceConfig] = {}

    @classmethod
    def get_config(cls, service_name: str, service_port: int) -> ServiceConfig:
        """Obtenir la configuration d'un service"""
        if service_name not in cls._configs:
            cls._configs[service_name] = ServiceConfig(
                service_name=service_name,
                service_port=service_port
            )
        return cls._configs[service_name]

    @classmethod
    def reload_config(cls, service_name: str) -> ServiceConfig:
        """Recharger la configuration d'un service"""
        config = cls._configs[service_name]
        config._load_from_file()
        config._load_from_env()
        config._validate_config()
        return config

    @classmethod
    def clear(cls) -> None:
        cls._configs.clear()


# Configurations prédéfinies pour chaque service
def get_gateway_config() -> ServiceConfig:
    """Configuration pour la passerelle HTTP"""
    return ConfigManager.get_config("gateway", 3000)


def get_dental_config() -> ServiceConfig:
    """Configuration pour le service Dental"""
    return ConfigManager.get_config("dental", 3020)


def get_auth_config() -> ServiceConfig:
    """Configuration pour le service Auth"""
    return ConfigManager.get_config("auth", 3010)


def get_notification_config() -> ServiceConfig:
    """Configuration pour le service Notification"""
    return ConfigManager.get_config("notification", 3030)
