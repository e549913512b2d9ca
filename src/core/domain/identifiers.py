"""Identificadores tipados del dominio.

Por qué un único tipo base:
- La validación (trim + no vacío) y la comparación case-insensitive se
  escriben una sola vez; cada subclase es un tipo nominal distinto.
- `ModelId("a") == OwnerId("a")` es `False` y ordenar tipos mezclados lanza
  `TypeError`, de modo que un type checker y el runtime detectan mezclas.
- En el wire siguen siendo strings planos (serializan con `str()`).
"""

from __future__ import annotations

from functools import total_ordering
from typing import Any, ClassVar, TypeVar

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema

from core.domain.errors import IdentifierError

IdT = TypeVar("IdT", bound="Identifier")


def _normalize(text: object) -> str | None:
    if not isinstance(text, str):
        return None
    stripped = text.strip()
    return stripped or None


def ordinal_key(text: str) -> str:
    """Clave ordinal case-insensitive, carácter a carácter.

    Un carácter cuya mayúscula ocupa más de uno (`ß` -> `SS`) se deja tal cual.
    """

    folded: list[str] = []
    for char in text:
        upper = char.upper()
        folded.append(upper if len(upper) == 1 else char)
    return "".join(folded)


@total_ordering
class Identifier:
    """Handle de texto validado, inmutable y case-insensitive."""

    __slots__ = ("_value",)

    description: ClassVar[str] = "identification"

    _value: str

    def __init__(self, text: str) -> None:
        value = _normalize(text)
        if value is None:
            raise IdentifierError(f"Invalid text representation of {self.description}: {text!r}")
        object.__setattr__(self, "_value", value)

    @classmethod
    def parse(cls: type[IdT], text: str) -> IdT:
        """Parse `text` or raise `IdentifierError`."""

        return cls(text)

    @classmethod
    def try_parse(cls: type[IdT], text: str | None) -> IdT | None:
        """Parse `text` or return `None` (never raises)."""

        if _normalize(text) is None:
            return None
        return cls(text)  # type: ignore[arg-type]

    def clone(self: IdT) -> IdT:
        return type(self)(self._value)

    @property
    def value(self) -> str:
        return self._value

    def _key(self) -> str:
        return ordinal_key(self._value)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __reduce__(self) -> tuple[Any, ...]:
        return (type(self), (self._value,))

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._key() == other._key()  # type: ignore[attr-defined]

    def __lt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._key() < other._key()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"

    # Pydantic v2: permite usar identificadores como tipos de campo.
    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._coerce,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        return handler(core_schema.str_schema(min_length=1))

    @classmethod
    def _coerce(cls: type[IdT], value: Any) -> IdT:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        raise IdentifierError(f"Invalid text representation of {cls.description}: {value!r}")


class APIKey(Identifier):
    """API key used as bearer token."""

    __slots__ = ()
    description = "an API key"

    def __repr__(self) -> str:
        # Nunca volcar el secreto completo en logs/tracebacks.
        return f"APIKey('{self._value[:3]}...')"


class OrganizationId(Identifier):
    __slots__ = ()
    description = "an organization identification"


class OwnerId(Identifier):
    __slots__ = ()
    description = "an owner identification"


class ModelId(Identifier):
    __slots__ = ()
    description = "a model identification"


class ObjectType(Identifier):
    __slots__ = ()
    description = "an object type"


class RequestId(Identifier):
    """Correlation id (`x-request-id`)."""

    __slots__ = ()
    description = "a request identification"


__all__ = [
    "APIKey",
    "Identifier",
    "ModelId",
    "ObjectType",
    "OrganizationId",
    "OwnerId",
    "RequestId",
    "ordinal_key",
]
