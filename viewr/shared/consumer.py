"""
Consommateur RabbitMQ côté microservice

Chaque microservice consomme une file durable, route chaque enveloppe vers
le handler enregistré pour son ``pattern`` et publie la réponse sur la file
``reply_to`` de l'appelant avec le même correlation id.
"""

import asyncio
import inspect
from typing import Any, Callable, Dict, List, Optional

import aio_pika
from aio_pika.abc import AbstractIncomingMessage

from .broker import Envelope, Reply
from .errors import RpcError
from .operations import HealthOperation, Operation
from .utils import LoggerFactory, safe_json_dumps, truncate_string


Handler = Callable[[Any], Any]

NO_HANDLER_ERROR = {
    "statusCode": 404,
    "error": "Not Found",
    "message": "There is no matching message handler defined in the remote service."
}

MALFORMED_MESSAGE_ERROR = {
    "statusCode": 400,
    "error": "Bad Request",
    "message": "Malformed message"
}


class MessageHandlerRegistry:
    """Table explicite opération -> handler"""

    def __init__(self):
        self._handlers: Dict[str, Handler] = {}

    def register(self, operation: Operation, handler: Handler) -> None:
        pattern = str(operation)
        if pattern in self._handlers:
            raise ValueError(f"Handler déjà enregistré pour {pattern}")
        self._handlers[pattern] = handler

    def get(self, pattern: str) -> Optional[Handler]:
        return self._handlers.get(pattern)

    def operations(self) -> List[str]:
        return sorted(self._handlers)

    def __contains__(self, pattern: str) -> bool:
        return str(pattern) in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)


class MicroserviceConsumer:
    """Boucle de consommation d'un microservice"""

    def __init__(
        self,
        service_name: str,
        queue_name: str,
        registry: MessageHandlerRegistry,
        url: str,
        prefetch_count: int = 10
    ):
        self.service_name = service_name
        self.queue_name = queue_name
        self.registry = registry
        self.url = url
        self.prefetch_count = prefetch_count
        self.connection: Optional[aio_pika.abc.AbstractRobustConnection] = None
        self.channel: Optional[aio_pika.abc.AbstractChannel] = None
        self.logger = LoggerFactory.get_logger(f"{service_name}.consumer")

        if HealthOperation.CHECK not in registry:
            registry.register(HealthOperation.CHECK, self._health)

    def _health(self, _payload: Any) -> Dict[str, Any]:
        return {
            "service": self.service_name,
            "queue": self.queue_name,
            "status": "healthy",
            "operations": len(self.registry)
        }

    @property
    def is_connected(self) -> bool:
        return self.connection is not None and not self.connection.is_closed

    async def start(self) -> None:
        """Se connecter à RabbitMQ et commencer la consommation"""
        self.connection = await aio_pika.connect_robust(self.url)
        self.channel = await self.connection.channel()
        await self.channel.set_qos(prefetch_count=self.prefetch_count)

        queue = await self.channel.declare_queue(self.queue_name, durable=True)
        await queue.consume(self._on_request)
        self.logger.info(f"✅ {self.service_name} à l'écoute sur la file: {self.queue_name}")

    async def stop(self) -> None:
        """Fermer la connexion"""
        if self.connection:
            await self.connection.close()
            self.connection = None
            self.channel = None
            self.logger.info(f"🛑 {self.service_name} déconnecté de RabbitMQ")

    async def _on_request(self, message: AbstractIncomingMessage) -> None:
        """Traiter un message entrant et répondre si demandé"""
        async with message.process():
            reply = await self.process_raw(message.body, correlation_id=message.correlation_id)
            if reply is None or not message.reply_to:
                return

            await self.channel.default_exchange.publish(
                aio_pika.Message(
                    body=reply.to_json().encode("utf-8"),
                    content_type="application/json",
                    correlation_id=reply.correlation_id
                ),
                routing_key=message.reply_to
            )

    async def process_raw(self, body: bytes, correlation_id: Optional[str] = None) -> Optional[Reply]:
        """
        Décoder une enveloppe, exécuter le handler et construire la réponse.

        Retourne ``None`` pour un message sans correlation id (envoi sans
        réponse). Un message illisible mais corrélé reçoit une erreur 400.
        """
        try:
            envelope = Envelope.from_json(body)
        except ValueError as e:
            if not correlation_id:
                self.logger.error(f"Message illisible ignoré: {e}")
                return None
            self.logger.error(f"Message illisible refusé ({correlation_id}): {e}")
            return Reply(correlation_id=correlation_id, err=dict(
                MALFORMED_MESSAGE_ERROR,
                message=f"Malformed message: {truncate_string(str(e), 200)}"
            ))

        correlation_id = correlation_id or envelope.correlation_id
        response, err = await self.dispatch(envelope)
        if not correlation_id:
            return None
        return Reply(correlation_id=correlation_id, response=response, err=err)

    async def dispatch(self, envelope: Envelope):
        """Exécuter le handler : retourne ``(response, err)``"""
        handler = self.registry.get(envelope.pattern)
        if handler is None:
            self.logger.warning(f"Aucun handler pour le pattern: {envelope.pattern}")
            return None, dict(NO_HANDLER_ERROR)

        self.logger.info(f"Traitement de {envelope.pattern}", extra={"pattern": envelope.pattern})
        try:
            if inspect.iscoroutinefunction(handler):
                result = await handler(envelope.data)
            else:
                result = await asyncio.to_thread(handler, envelope.data)
        except RpcError as e:
            self.logger.warning(f"{envelope.pattern} refusé ({e.status_code}): {e.message}")
            return None, e.to_dict()
        except Exception as e:
            self.logger.exception(f"❌ Erreur dans le handler {envelope.pattern}: {e}")
            return None, {
                "statusCode": 500,
                "error": "Internal Server Error",
                "message": truncate_string(str(e) or type(e).__name__, 500)
            }

        try:
            safe_json_dumps(result)
        except (TypeError, ValueError) as e:
            self.logger.error(f"Réponse non sérialisable pour {envelope.pattern}: {e}")
            return None, {
                "statusCode": 500,
                "error": "Internal Server Error",
                "message": "Response is not serializable"
            }
        return result, None
