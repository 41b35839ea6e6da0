"""
Payload encoding and decoding shared by the cache and network paths.

Responses are cached as raw text and decoded here whether they come from
the wire or from the local store, so both paths fail the same way.
"""

from typing import Any, Type, TypeVar, Union

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import to_json

from .domain.exceptions import DeserializationError

T = TypeVar("T")


def _model_name(model: Any) -> str:
    return getattr(model, "__name__", None) or str(model)


def encode_payload(value: Any) -> str:
    """Serialize a model, list of models or plain JSON value using wire aliases."""
    return to_json(value, by_alias=True).decode("utf-8")


def decode_payload(raw: Union[str, bytes], model: Type[T]) -> T:
    """
    Decode JSON text into ``model``.

    Args:
        raw: JSON text as cached or received
        model: Target type, e.g. ``Profile`` or ``List[FriendStatus]``

    Returns:
        The decoded value

    Raises:
        DeserializationError: If the text is not valid JSON for ``model``
    """
    try:
        return TypeAdapter(model).validate_json(raw)
    except PydanticValidationError as error:
        raise DeserializationError(_model_name(model), str(error)) from error
