"""Exceptions partagées par la passerelle et les microservices"""

from enum import Enum
from typing import Any, Dict, Optional


class ViewrError(Exception):
    """Exception de base pour l'application"""
    pass


class ConfigurationError(ViewrError):
    """Erreur de configuration"""
    pass


class DispatchErrorKind(str, Enum):
    """Catégories d'échec d'un aller-retour via le broker"""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    DOWNSTREAM = "downstream"


class DispatchError(ViewrError):
    """
    Échec d'un envoi vers un microservice.

    ``status_code`` n'est renseigné que lorsque le microservice l'a fourni
    (kind DOWNSTREAM / NOT_FOUND). ``details`` contient le corps d'erreur
    d'origine tel que reçu.
    """

    def __init__(
        self,
        kind: DispatchErrorKind,
        message: str,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.cause = cause
        self.details = details or {}

    @classmethod
    def from_reply(cls, err: Any) -> "DispatchError":
        """Construire depuis le champ ``err`` d'une réponse du broker"""
        if not isinstance(err, dict):
            return cls(DispatchErrorKind.DOWNSTREAM, str(err), details={"message": str(err)})

        status_code = err.get("statusCode")
        if not isinstance(status_code, int):
            status_code = None
        message = err.get("message") or err.get("error") or "Downstream error"
        if isinstance(message, list):
            message = "; ".join(str(m) for m in message)

        if status_code == 404:
            kind = DispatchErrorKind.NOT_FOUND
        elif status_code == 400:
            kind = DispatchErrorKind.VALIDATION
        else:
            kind = DispatchErrorKind.DOWNSTREAM
        return cls(kind, str(message), status_code=status_code, details=err)

    def __repr__(self) -> str:
        return f"DispatchError(kind={self.kind.value!r}, status_code={self.status_code!r}, message={self.message!r})"


class RpcError(ViewrError):
    """Erreur structurée levée par un handler de microservice"""

    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str, status_code: Optional[int] = None, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error is not None:
            self.error = error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "statusCode": self.status_code,
            "error": self.error,
            "message": self.message
        }


class NotFoundError(RpcError):
    """Ressource non trouvée"""
    status_code = 404
    error = "Not Found"


class PayloadValidationError(RpcError):
    """Charge utile invalide"""
    status_code = 400
    error = "Bad Request"


class ConflictError(RpcError):
    """Conflit d'état (clé dupliquée, etc.)"""
    status_code = 409
    error = "Conflict"


class GatewayError(ViewrError):
    """
    Erreur renvoyée au client HTTP par la passerelle.

    Le corps JSON suit toujours la forme
    ``{statusCode, error, message, originalError?}``.
    """

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        original_error: Optional[Any] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.message = message
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        body = {
            "statusCode": self.status_code,
            "error": self.error,
            "message": self.message
        }
        if self.original_error is not None:
            body["originalError"] = self.original_error
        return body
