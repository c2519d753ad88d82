"""
Pont requête/réponse RabbitMQ pour la passerelle Viewr

- ``BrokerClientPool`` : une connexion persistante par file cible, créée à la
  demande et réutilisée par toutes les requêtes vers cette file.
- ``RequestDispatcher`` : publie une enveloppe corrélée et attend la réponse
  correspondante dans la limite d'un timeout.

Format des messages (JSON, UTF-8) :
    requête  {"pattern": "lot.create", "data": {...}, "id": "<correlation id>"}
    réponse  {"id": "<correlation id>", "response": ..., "err": ..., "isDisposed": true}
Un envoi sans réponse omet ``id`` et ``reply_to``.
"""

import json
import uuid
import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

import aio_pika
from aio_pika import DeliveryMode
from aio_pika.abc import AbstractIncomingMessage
from aio_pika.exceptions import AMQPError

from .errors import DispatchError, DispatchErrorKind
from .operations import Operation
from .utils import LoggerFactory, safe_json_dumps, truncate_string


DEFAULT_TIMEOUT_MS = 30000

TRANSPORT_ERRORS = (AMQPError, OSError)


@dataclass
class Envelope:
    """Unité envoyée sur le broker"""
    pattern: str
    data: Any = field(default_factory=dict)
    correlation_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convertir en dictionnaire pour sérialisation"""
        result = {"pattern": self.pattern, "data": self.data}
        if self.correlation_id:
            result["id"] = self.correlation_id
        return result

    def to_json(self) -> str:
        """Sérialiser en JSON"""
        return safe_json_dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Envelope":
        """Créer depuis dictionnaire"""
        pattern = data.get("pattern")
        if isinstance(pattern, dict):
            # Certains clients publient un pattern objet {"cmd": "..."}
            pattern = pattern.get("cmd")
        if not isinstance(pattern, str) or not pattern:
            raise ValueError("Enveloppe sans pattern")
        return cls(pattern=pattern, data=data.get("data"), correlation_id=data.get("id"))

    @classmethod
    def from_json(cls, raw: Union[str, bytes]) -> "Envelope":
        """Désérialiser depuis JSON"""
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("Enveloppe JSON invalide")
        return cls.from_dict(data)


@dataclass
class Reply:
    """Réponse corrélée renvoyée par un microservice"""
    correlation_id: Optional[str]
    response: Any = None
    err: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.correlation_id,
            "response": self.response,
            "err": self.err,
            "isDisposed": True
        }

    def to_json(self) -> str:
        return safe_json_dumps(self.to_dict())

    @classmethod
    def from_json(cls, raw: Union[str, bytes]) -> "Reply":
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("Réponse JSON invalide")
        return cls(
            correlation_id=data.get("id"),
            response=data.get("response"),
            err=data.get("err")
        )


@dataclass
class DispatchResult:
    """Issue d'un envoi : soit ``data``, soit ``error``"""
    ok: bool
    data: Any = None
    error: Optional[DispatchError] = None

    @classmethod
    def success(cls, data: Any) -> "DispatchResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: DispatchError) -> "DispatchResult":
        return cls(ok=False, error=error)

    def unwrap(self) -> Any:
        """Retourner la donnée ou lever l'erreur"""
        if not self.ok:
            raise self.error
        return self.data


class ClientHandle:
    """
    Connexion + canal liés à une file cible.

    Partagé par tous les appels concurrents vers la même file : chaque
    requête enregistre sa propre attente, indexée par correlation id, et
    n'est résolue qu'une seule fois.
    """

    def __init__(self, route_key: str, connection: aio_pika.abc.AbstractConnection):
        self.route_key = route_key
        self.connection = connection
        self.channel: Optional[aio_pika.abc.AbstractChannel] = None
        self.callback_queue: Optional[aio_pika.abc.AbstractQueue] = None
        self._pending: Dict[str, asyncio.Future] = {}
        self._closed = False
        self.logger = LoggerFactory.get_logger("broker.client")

    async def open(self) -> None:
        """Ouvrir le canal, déclarer la file durable et la file de réponse"""
        self.channel = await self.connection.channel()
        await self.channel.declare_queue(self.route_key, durable=True)
        self.callback_queue = await self.channel.declare_queue(exclusive=True, auto_delete=True)
        await self.callback_queue.consume(self._on_reply, no_ack=True)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def request(self, envelope: Envelope, timeout: float) -> Reply:
        """Publier une enveloppe et attendre la réponse corrélée"""
        if self._closed:
            raise DispatchError(DispatchErrorKind.TRANSPORT, f"Client fermé pour la file {self.route_key}")

        future = asyncio.get_running_loop().create_future()
        self._pending[envelope.correlation_id] = future
        try:
            await self._publish(envelope, reply_to=self.callback_queue.name)
            return await asyncio.wait_for(future, timeout)
        finally:
            self._pending.pop(envelope.correlation_id, None)

    async def emit(self, envelope: Envelope) -> None:
        """Publier sans attendre de réponse"""
        if self._closed:
            raise DispatchError(DispatchErrorKind.TRANSPORT, f"Client fermé pour la file {self.route_key}")
        await self._publish(envelope)

    async def _publish(self, envelope: Envelope, reply_to: Optional[str] = None) -> None:
        message = aio_pika.Message(
            body=envelope.to_json().encode("utf-8"),
            content_type="application/json",
            correlation_id=envelope.correlation_id,
            reply_to=reply_to,
            delivery_mode=DeliveryMode.PERSISTENT
        )
        await self.channel.default_exchange.publish(message, routing_key=self.route_key)

    async def _on_reply(self, message: AbstractIncomingMessage) -> None:
        """Résoudre l'attente correspondant à une réponse reçue"""
        correlation_id = message.correlation_id
        try:
            reply = Reply.from_json(message.body)
        except ValueError as e:
            self.logger.error(f"Réponse illisible sur la file {self.route_key}: {e}")
            future = self._pending.get(correlation_id)
            if future is not None and not future.done():
                future.set_exception(DispatchError(
                    DispatchErrorKind.TRANSPORT,
                    f"Réponse illisible de la file {self.route_key}",
                    cause=e
                ))
            return

        correlation_id = correlation_id or reply.correlation_id
        future = self._pending.get(correlation_id)
        if future is None or future.done():
            self.logger.warning(
                f"Réponse tardive ignorée pour la file {self.route_key}",
                extra={"correlation_id": correlation_id}
            )
            return
        future.set_result(reply)

    async def close(self) -> None:
        """Fermer la connexion et libérer les attentes en cours"""
        self._closed = True
        for future in self._pending.values():
            if not future.done():
                future.set_exception(DispatchError(
                    DispatchErrorKind.TRANSPORT,
                    f"Connexion fermée pour la file {self.route_key}"
                ))
        self._pending.clear()
        await self.connection.close()


ConnectionFactory = Callable[[str], Awaitable[aio_pika.abc.AbstractConnection]]


class BrokerClientPool:
    """Registre des connexions, une par file cible"""

    def __init__(
        self,
        url: str,
        connection_factory: Optional[ConnectionFactory] = None,
        connect_timeout_ms: int = DEFAULT_TIMEOUT_MS
    ):
        self.url = url
        self.connect_timeout_ms = connect_timeout_ms
        self._connection_factory = connection_factory or self._connect_robust
        self._clients: Dict[str, ClientHandle] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self.logger = LoggerFactory.get_logger("broker.pool")

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, route_key: str) -> bool:
        return route_key in self._clients

    def route_keys(self) -> List[str]:
        return sorted(self._clients)

    async def get_or_create_client(self, route_key: str) -> ClientHandle:
        """Obtenir le client de la file, en le créant au premier appel"""
        client = self._clients.get(route_key)
        if client is not None:
            return client

        lock = self._locks.setdefault(route_key, asyncio.Lock())
        try:
            async with lock:
                client = self._clients.get(route_key)
                if client is not None:
                    return client

                client = await self._create_client(route_key)
                existing = self._clients.setdefault(route_key, client)
                if existing is not client:
                    # Créé en parallèle par un appelant arrivé après un échec
                    await client.close()
                    return existing
                self.logger.info(f"✅ Client RabbitMQ créé pour la file: {route_key}")
                return client
        finally:
            if route_key not in self._clients and self._locks.get(route_key) is lock:
                del self._locks[route_key]

    async def _connect_robust(self, url: str) -> aio_pika.abc.AbstractRobustConnection:
        return await aio_pika.connect_robust(url, timeout=self.connect_timeout_ms / 1000)

    async def _create_client(self, route_key: str) -> ClientHandle:
        try:
            connection = await self._connection_factory(self.url)
        except TRANSPORT_ERRORS as e:
            self.logger.error(f"❌ Connexion RabbitMQ impossible pour la file {route_key}: {e}")
            raise DispatchError(
                DispatchErrorKind.TRANSPORT,
                f"Connexion impossible à la file {route_key}: {e}",
                cause=e
            ) from e

        client = ClientHandle(route_key, connection)
        try:
            await client.open()
        except asyncio.CancelledError:
            await connection.close()
            raise
        except TRANSPORT_ERRORS as e:
            self.logger.error(f"❌ Ouverture du canal impossible pour la file {route_key}: {e}")
            await connection.close()
            raise DispatchError(
                DispatchErrorKind.TRANSPORT,
                f"Canal indisponible pour la file {route_key}: {e}",
                cause=e
            ) from e
        return client

    async def close_all(self) -> None:
        """Fermer toutes les connexions ; les échecs sont journalisés"""
        self.logger.info("Fermeture de toutes les connexions RabbitMQ")
        clients = list(self._clients.items())
        results = await asyncio.gather(
            *(client.close() for _, client in clients),
            return_exceptions=True
        )
        for (route_key, _), result in zip(clients, results):
            if isinstance(result, Exception):
                self.logger.error(f"Erreur fermeture du client {route_key}: {result}")

        self._clients.clear()
        self._locks.clear()
        self.logger.info("🛑 Connexions RabbitMQ fermées")


class RequestDispatcher:
    """Envoi corrélé d'opérations vers les microservices"""

    def __init__(self, pool: BrokerClientPool, default_timeout_ms: int = DEFAULT_TIMEOUT_MS):
        self.pool = pool
        self.default_timeout_ms = default_timeout_ms
        self.logger = LoggerFactory.get_logger("broker.dispatcher")

    async def send(
        self,
        route_key: str,
        operation: Union[Operation, str],
        payload: Any = None,
        timeout_ms: Optional[int] = None
    ) -> DispatchResult:
        """
        Envoyer une opération et attendre la réponse.

        Ne lève jamais : toute issue (réponse, erreur distante, timeout,
        échec de transport) est rendue sous forme de ``DispatchResult``.
        Le timeout couvre l'aller-retour complet : connexion, publication
        et attente de la réponse.
        """
        pattern = str(operation)
        timeout_ms = timeout_ms or self.default_timeout_ms
        envelope = Envelope(
            pattern=pattern,
            data={} if payload is None else payload,
            correlation_id=str(uuid.uuid4())
        )
        log_extra = {"queue": route_key, "pattern": pattern, "correlation_id": envelope.correlation_id}
        self.logger.info(f"Envoi vers la file: {route_key}, pattern: {pattern}", extra=log_extra)

        timeout = timeout_ms / 1000
        try:
            reply = await asyncio.wait_for(self._round_trip(route_key, envelope, timeout), timeout)
        except asyncio.TimeoutError:
            error = DispatchError(
                DispatchErrorKind.TIMEOUT,
                f"Aucune réponse de la file {route_key} pour {pattern} après {timeout_ms} ms"
            )
            self.logger.error(error.message, extra=log_extra)
            return DispatchResult.failure(error)
        except DispatchError as e:
            self.logger.error(f"Échec d'envoi vers {route_key} ({pattern}): {e.message}", extra=log_extra)
            return DispatchResult.failure(e)
        except (TypeError, ValueError) as e:
            error = DispatchError(
                DispatchErrorKind.TRANSPORT,
                f"Sérialisation impossible pour {pattern}: {e}",
                cause=e
            )
            self.logger.error(error.message, extra=log_extra)
            return DispatchResult.failure(error)
        except TRANSPORT_ERRORS as e:
            error = DispatchError(
                DispatchErrorKind.TRANSPORT,
                f"Communication impossible avec la file {route_key}: {e}",
                cause=e
            )
            self.logger.error(error.message, extra=log_extra)
            return DispatchResult.failure(error)

        if reply.err is not None:
            error = DispatchError.from_reply(reply.err)
            self.logger.warning(
                f"Erreur distante de {route_key} ({pattern}): {truncate_string(error.message, 200)}",
                extra={**log_extra, "status_code": error.status_code}
            )
            return DispatchResult.failure(error)

        self.logger.info(f"Réponse reçue de la file: {route_key}, pattern: {pattern}", extra=log_extra)
        return DispatchResult.success(reply.response)

    async def _round_trip(self, route_key: str, envelope: Envelope, timeout: float) -> Reply:
        client = await self.pool.get_or_create_client(route_key)
        return await client.request(envelope, timeout)

    async def _emit(self, route_key: str, envelope: Envelope) -> None:
        client = await self.pool.get_or_create_client(route_key)
        await client.emit(envelope)

    async def send_no_reply(
        self,
        route_key: str,
        operation: Union[Operation, str],
        payload: Any = None
    ) -> None:
        """
        Publier sans attendre de réponse (best effort).

        Aucune confirmation de livraison n'est attendue ; seule une erreur
        de publication immédiate est remontée. Connexion et publication
        sont bornées par le timeout par défaut.
        """
        pattern = str(operation)
        envelope = Envelope(pattern=pattern, data={} if payload is None else payload)
        self.logger.info(f"Envoi sans réponse vers la file: {route_key}, pattern: {pattern}")

        try:
            await asyncio.wait_for(self._emit(route_key, envelope), self.default_timeout_ms / 1000)
        except asyncio.TimeoutError as e:
            self.logger.error(f"Publication vers {route_key} ({pattern}) non terminée après "
                              f"{self.default_timeout_ms} ms")
            raise DispatchError(
                DispatchErrorKind.TIMEOUT,
                f"Publication vers la file {route_key} non terminée après {self.default_timeout_ms} ms",
                cause=e
            ) from e
        except DispatchError:
            raise
        except (TypeError, ValueError) as e:
            raise DispatchError(
                DispatchErrorKind.TRANSPORT,
                f"Sérialisation impossible pour {pattern}: {e}",
                cause=e
            ) from e
        except TRANSPORT_ERRORS as e:
            self.logger.error(f"Échec de publication vers {route_key} ({pattern}): {e}")
            raise DispatchError(
                DispatchErrorKind.TRANSPORT,
                f"Communication impossible avec la file {route_key}: {e}",
                cause=e
            ) from e
