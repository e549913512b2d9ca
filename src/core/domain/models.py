"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Registros inmutables (`frozen`) con igualdad derivada de sus campos.
- Los identificadores tipados se validan como tipos de campo normales.

Por qué un parser explícito además de `model_validate`:
- Los errores deben nombrar el campo afectado ("<campo> invalid or missing")
  y un campo opcional presente pero inválido es un error, no se descarta.
- Se aceptan hooks de post-proceso para enriquecer el registro.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any, TypeVar

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic.config import ConfigDict

from core.domain.errors import FormatError
from core.domain.identifiers import Identifier, ModelId, ObjectType, OwnerId, ordinal_key

IdT = TypeVar("IdT", bound=Identifier)

CustomModelParser = Callable[[Mapping[str, Any], "Model"], "Model"]
CustomModelSerializer = Callable[["Model", dict[str, Any]], dict[str, Any]]


def to_utc(value: datetime) -> datetime:
    """Normaliza a UTC; los datetimes naive se interpretan como UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def from_unix_seconds(value: object) -> datetime | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def to_unix_seconds(value: datetime) -> int:
    return int(to_utc(value).timestamp())


def _ensure_object(json: object) -> Mapping[str, Any]:
    if not isinstance(json, Mapping) or not json:
        raise FormatError("The given JSON object must not be null or empty!")
    return json


def _mandatory_id(json: Mapping[str, Any], key: str, id_type: type[IdT], description: str) -> IdT:
    value = id_type.try_parse(json.get(key))
    if value is None:
        raise FormatError(f"{description} invalid or missing")
    return value


def _optional_id(json: Mapping[str, Any], key: str, id_type: type[IdT], description: str) -> IdT | None:
    raw = json.get(key)
    if raw is None:
        return None
    value = id_type.try_parse(raw)
    if value is None:
        raise FormatError(f"{description} invalid")
    return value


def _mandatory_timestamp(json: Mapping[str, Any], key: str, description: str) -> datetime:
    value = from_unix_seconds(json.get(key))
    if value is None:
        raise FormatError(f"{description} invalid or missing")
    return value


class Permission(BaseModel):
    """Permiso asociado a un modelo (`model_permission`)."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str = Field(..., min_length=1, description="Identificador del permiso.")
    object_type: str = Field(
        default="model_permission",
        alias="object",
        description="Tipo de objeto reportado por la API.",
    )
    created: datetime = Field(..., description="Creación del permiso (UTC).")
    allow_create_engine: bool = False
    allow_sampling: bool = False
    allow_logprobs: bool = False
    allow_search_indices: bool = False
    allow_view: bool = False
    allow_fine_tuning: bool = False
    organization: str = Field(default="*", description="Organización a la que aplica.")
    group: str | None = None
    is_blocking: bool = False

    @field_validator("created", mode="after")
    @classmethod
    def _created_utc(cls, value: datetime) -> datetime:
        return to_utc(value)

    @classmethod
    def parse(cls, json: object) -> Permission:
        data = _ensure_object(json)
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise FormatError(f"permission invalid: {exc.errors()[0]['msg']}") from exc

    def to_json(self) -> dict[str, Any]:
        out = self.model_dump(by_alias=True)
        out["created"] = to_unix_seconds(self.created)
        return out


class Model(BaseModel):
    """An AI model as described by `GET /models`.

    `root` y `parent` referencian otros modelos solo por id.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: ModelId = Field(..., description="Identificador único del modelo.")
    object_type: ObjectType = Field(..., alias="object", description="Tipo de objeto (p.ej. 'model').")
    created: datetime = Field(..., description="Momento de creación (UTC).")
    owned_by: OwnerId = Field(..., description="Propietario del modelo.")
    root: ModelId | None = Field(default=None, description="Modelo raíz (opcional).")
    parent: ModelId | None = Field(default=None, description="Modelo padre (opcional).")
    permissions: tuple[Permission, ...] = Field(
        default=(),
        description="Permisos publicados junto al modelo.",
    )

    @field_validator("created", mode="after")
    @classmethod
    def _created_utc(cls, value: datetime) -> datetime:
        return to_utc(value)

    @classmethod
    def parse(cls, json: object, custom_parser: CustomModelParser | None = None) -> Model:
        """Parse a JSON object or raise `FormatError`."""

        data = _ensure_object(json)

        model = cls(
            id=_mandatory_id(data, "id", ModelId, "model identification"),
            object_type=_mandatory_id(data, "object", ObjectType, "object type"),
            created=_mandatory_timestamp(data, "created", "creation timestamp"),
            owned_by=_mandatory_id(data, "owned_by", OwnerId, "owner identification"),
            root=_optional_id(data, "root", ModelId, "root model identification"),
            parent=_optional_id(data, "parent", ModelId, "parent model identification"),
            permissions=_parse_permissions(data.get("permission")),
        )

        if custom_parser is not None:
            try:
                model = custom_parser(data, model)
            except FormatError:
                raise
            except Exception as exc:
                raise FormatError(f"The given JSON representation of a model is invalid: {exc}") from exc
        return model

    @classmethod
    def try_parse(
        cls, json: object, custom_parser: CustomModelParser | None = None
    ) -> tuple[Model, None] | tuple[None, str]:
        """Like `parse`, but returns `(model, None)` or `(None, error_text)`."""

        try:
            return cls.parse(json, custom_parser), None
        except FormatError as exc:
            return None, str(exc)

    def to_json(self, custom_serializer: CustomModelSerializer | None = None) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": str(self.id),
            "object": str(self.object_type),
            "created": to_unix_seconds(self.created),
            "owned_by": str(self.owned_by),
        }
        if self.root is not None:
            out["root"] = str(self.root)
        if self.parent is not None:
            out["parent"] = str(self.parent)
        if self.permissions:
            out["permission"] = [p.to_json() for p in self.permissions]

        if custom_serializer is not None:
            out = custom_serializer(self, out)
        return out

    def _sort_key(self) -> tuple[Any, ...]:
        def opt(value: Identifier | None) -> tuple[int, str]:
            return (0, "") if value is None else (1, ordinal_key(str(value)))

        return (
            ordinal_key(str(self.id)),
            ordinal_key(str(self.object_type)),
            self.created,
            ordinal_key(str(self.owned_by)),
            opt(self.root),
            opt(self.parent),
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Model):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Model):
            return NotImplemented
        return self._sort_key() <= other._sort_key()

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Model):
            return NotImplemented
        return self._sort_key() > other._sort_key()

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Model):
            return NotImplemented
        return self._sort_key() >= other._sort_key()

    def __str__(self) -> str:
        return f"{self.id} ({self.owned_by})"


def _parse_permissions(raw: object) -> tuple[Permission, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise FormatError("permissions invalid")
    return tuple(Permission.parse(item) for item in raw)


__all__ = [
    "CustomModelParser",
    "CustomModelSerializer",
    "Model",
    "Permission",
    "from_unix_seconds",
    "to_unix_seconds",
    "to_utc",
]
