"""Typed configuration models and the inbound schema contract.

Every resource and data source declares a ``ResourceConfig`` subclass. Field
types carry their validators through ``Annotated`` aliases (see
``validators``) and their lifecycle markers (``ForceNew``, ``Computed``,
``Sensitive``) as extra metadata, so one class is both the validation table
and the published schema.
"""

import enum
import typing
from typing import Annotated, Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.fields import FieldInfo

from ..exceptions import ConfigurationValidationError
from .markers import Computed, FieldMarker, ForceNew, Sensitive

C = TypeVar("C", bound="ResourceConfig")

REDACTED = "***"


class ResourceConfig(BaseModel):
    """Base class for resource and data source configuration models."""

    model_config = ConfigDict(extra="forbid")


class Block(BaseModel):
    """Base class for nested configuration blocks."""

    model_config = ConfigDict(extra="forbid")


def parse_config(
    model: Type[C], raw: Mapping[str, Any], resource_type: Optional[str] = None
) -> C:
    """Validate ``raw`` against ``model``.

    Raises:
        ConfigurationValidationError: One entry in ``validation_errors`` per
            failing field, raised before anything touches the network.
    """
    try:
        return model.model_validate(dict(raw))
    except PydanticValidationError as e:
        errors = []
        for err in e.errors():
            location = ".".join(str(part) for part in err["loc"]) or "<root>"
            errors.append(f"{location}: {err['msg']}")
        label = resource_type or model.__name__
        raise ConfigurationValidationError(
            f"Invalid configuration for {label}: " + "; ".join(errors),
            resource_type=resource_type,
            validation_errors=errors,
        ) from e


def _unwrap(annotation: Any, collected: List[Any]) -> Any:
    """Strip Annotated/Optional layers, collecting metadata along the way."""
    while True:
        origin = typing.get_origin(annotation)
        if origin is Annotated:
            base, *metadata = typing.get_args(annotation)
            collected.extend(metadata)
            annotation = base
        elif origin is Union:
            args = [a for a in typing.get_args(annotation) if a is not type(None)]
            if len(args) != 1:
                return annotation
            annotation = args[0]
        else:
            return annotation


def _field_metadata(field: FieldInfo) -> List[Any]:
    collected = list(field.metadata)
    _unwrap(field.annotation, collected)
    return collected


def _has_marker(field: FieldInfo, marker: FieldMarker) -> bool:
    return any(item is marker for item in _field_metadata(field))


def _is_block(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, BaseModel)


def _describe_type(annotation: Any) -> Dict[str, Any]:
    collected: List[Any] = []
    tp = _unwrap(annotation, collected)
    origin = typing.get_origin(tp)

    if origin in (list, set, frozenset):
        (element,) = typing.get_args(tp) or (Any,)
        kind = "list" if origin is list else "set"
        inner = _describe_type(element)
        if "block" in inner:
            return {"type": kind, "block": inner["block"]}
        return {"type": kind, "elem": inner["type"]}
    if origin is dict:
        return {"type": "map"}
    if origin is typing.Literal:
        return {"type": "string", "allowed_values": list(typing.get_args(tp))}
    if _is_block(tp):
        return {"type": "block", "block": describe_schema(tp)}
    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        return {"type": "string", "allowed_values": [m.value for m in tp]}
    if tp is bool:
        return {"type": "bool"}
    if tp is int:
        return {"type": "int"}
    if tp is float:
        return {"type": "float"}
    return {"type": "string"}


def describe_schema(model: Type[BaseModel]) -> Dict[str, Dict[str, Any]]:
    """Export the inbound contract for ``model``.

    Returns a mapping of field name to its type, required/optional/computed,
    force_new and sensitive flags, validator names and nested block schema.
    """
    schema: Dict[str, Dict[str, Any]] = {}
    for name, field in model.model_fields.items():
        metadata = _field_metadata(field)
        required = field.is_required()
        computed = any(item is Computed for item in metadata)
        entry: Dict[str, Any] = {
            "required": required,
            "optional": not required,
            "computed": computed,
            "force_new": any(item is ForceNew for item in metadata),
            "sensitive": any(item is Sensitive for item in metadata),
            "validators": [
                item.func.__name__
                for item in metadata
                if isinstance(item, AfterValidator)
            ],
        }
        entry.update(_describe_type(field.annotation))
        if field.description:
            entry["description"] = field.description
        schema[name] = entry
    return schema


def force_new_fields(model: Type[BaseModel]) -> List[str]:
    return [
        name for name, field in model.model_fields.items() if _has_marker(field, ForceNew)
    ]


def computed_fields(model: Type[BaseModel]) -> List[str]:
    return [
        name for name, field in model.model_fields.items() if _has_marker(field, Computed)
    ]


def requires_replacement(
    model: Type[BaseModel], prior: Mapping[str, Any], planned: Mapping[str, Any]
) -> List[str]:
    """List the force-new fields whose value differs between prior and planned.

    Empty prior state means nothing exists yet, so nothing needs replacing.
    Computed fields left unset in ``planned`` keep their prior value.
    """
    if not prior:
        return []
    changed = []
    for name, field in model.model_fields.items():
        if not _has_marker(field, ForceNew):
            continue
        new = planned.get(name)
        if new is None and _has_marker(field, Computed):
            continue
        if prior.get(name) != new:
            changed.append(name)
    return changed


def _block_model(annotation: Any) -> Optional[Type[BaseModel]]:
    tp = _unwrap(annotation, [])
    if typing.get_origin(tp) in (list, set, frozenset):
        (element,) = typing.get_args(tp) or (Any,)
        tp = _unwrap(element, [])
    return tp if _is_block(tp) else None


def redact(model: Type[BaseModel], values: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy ``values`` with every sensitive field masked, nested blocks included."""
    result = dict(values)
    for name, field in model.model_fields.items():
        value = result.get(name)
        if value is None:
            continue
        if _has_marker(field, Sensitive):
            result[name] = REDACTED
            continue
        block = _block_model(field.annotation)
        if block is None:
            continue
        if isinstance(value, Mapping):
            result[name] = redact(block, value)
        elif isinstance(value, list):
            result[name] = [
                redact(block, item) if isinstance(item, Mapping) else item
                for item in value
            ]
    return result
