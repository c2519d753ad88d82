"""
Lecture des charges utiles reçues par les handlers de microservice
"""

from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import PayloadValidationError


ModelT = TypeVar("ModelT", bound=BaseModel)


def require_mapping(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise PayloadValidationError("Payload must be a JSON object")
    return payload


def require_field(payload: Any, name: str) -> Any:
    """Champ obligatoire non vide de la charge utile"""
    value = require_mapping(payload).get(name)
    if value is None or value == "":
        raise PayloadValidationError(f"{name} is required")
    return value


def require_id(payload: Any) -> str:
    return str(require_field(payload, "id"))


def parse_model(model: Type[ModelT], data: Any) -> ModelT:
    """Valider ``data`` contre un modèle, erreurs converties en 400"""
    try:
        return model.model_validate(require_mapping(data))
    except ValidationError as e:
        messages = []
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            messages.append(f"{location}: {error['msg']}" if location else error["msg"])
        raise PayloadValidationError("; ".join(messages)) from e
