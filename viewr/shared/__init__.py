"""
Composants communs à la passerelle et aux microservices Viewr
"""

from .broker import BrokerClientPool, DispatchResult, Envelope, Reply, RequestDispatcher
from .config import ServiceConfig, ConfigManager
from .consumer import MessageHandlerRegistry, MicroserviceConsumer
from .database import DatabaseManager
from .errors import DispatchError, DispatchErrorKind, GatewayError, RpcError
from .middleware import CommonMiddleware
from .utils import LoggerFactory, HealthChecker

__all__ = [
    "BrokerClientPool",
    "DispatchResult",
    "Envelope",
    "Reply",
    "RequestDispatcher",
    "ServiceConfig",
    "ConfigManager",
    "MessageHandlerRegistry",
    "MicroserviceConsumer",
    "DatabaseManager",
    "DispatchError",
    "DispatchErrorKind",
    "GatewayError",
    "RpcError",
    "CommonMiddleware",
    "LoggerFactory",
    "HealthChecker"
]
