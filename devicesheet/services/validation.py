from __future__ import annotations

import json
import logging
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Any, Generic, TypeVar

import jsonschema
from jsonschema.exceptions import best_match

from ..models.entities import AutoEvent, Device, DeviceCommand, DeviceProfile, DeviceResource
from ..models.errors import ConversionError, EntityValidationError, ErrorKind

"""Entity validation and error aggregation.

Field-level rules live in JSON schemas under ``schemas/`` (one per entity
type) and are applied to the entity's ``to_dict()`` form. Profiles get a few
cross-entity checks on top.

Validation failures never propagate out of the aggregator: they are recorded
in a name-keyed error map and the entity is left out of the results.
"""

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"
_SCHEMA_FILES: dict[type, str] = {
    Device: "device.json",
    AutoEvent: "autoevent.json",
    DeviceResource: "device_resource.json",
    DeviceCommand: "device_command.json",
    DeviceProfile: "device_profile.json",
}

RESOURCE_ERROR_PREFIX = "deviceResource_"
COMMAND_ERROR_PREFIX = "deviceCommand_"
PROFILE_ERROR_PREFIX = "deviceProfile_"
AUTO_EVENT_ERROR_PREFIX = "autoEvent_"


@lru_cache(maxsize=None)
def _validator(entity_type: type) -> jsonschema.Draft202012Validator:
    file_name = _SCHEMA_FILES.get(entity_type)
    if file_name is None:
        raise ConversionError(f"no validation schema for {entity_type.__name__}", ErrorKind.SERVER_ERROR)
    path = _SCHEMAS_DIR / file_name
    try:
        schema = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConversionError(f"cannot load validation schema {path}", ErrorKind.SERVER_ERROR) from e
    return jsonschema.Draft202012Validator(schema)


def _describe(error: jsonschema.ValidationError) -> str:
    location = ".".join(str(p) for p in error.absolute_path)
    return f"{location}: {error.message}" if location else error.message


def validate_entity(entity: Any) -> None:
    """Validate ``entity`` against the schema of its type.

    Raises:
        EntityValidationError: (ContractInvalid) the entity violates its schema
    """
    validator = _validator(type(entity))
    error = best_match(validator.iter_errors(entity.to_dict()))
    if error is not None:
        raise EntityValidationError(f"{type(entity).__name__} validation error: {_describe(error)}")


def validate_profile(profile: DeviceProfile) -> None:
    """Validate a profile and the consistency of its resources and commands.

    Resource and command names must be unique across both collections, and
    every resource operation must name a resource of the profile.
    """
    validate_entity(profile)

    seen: set[str] = set()
    for resource in profile.device_resources:
        if resource.name in seen:
            raise EntityValidationError(f"device resource {resource.name} is duplicated")
        seen.add(resource.name)

    resource_names = set(seen)
    for command in profile.device_commands:
        if command.name in seen:
            raise EntityValidationError(f"device command {command.name} is duplicated")
        seen.add(command.name)
        for operation in command.resource_operations:
            if operation.device_resource not in resource_names:
                raise EntityValidationError(
                    f"device command {command.name}: resource operation {operation.device_resource} "
                    "doesn't match any device resource"
                )


class ValidationAggregator(Generic[T]):
    """Collects validated entities and the name-keyed errors of rejected ones.

    An entity name is never both accepted and recorded: ``record`` removes a
    previously accepted entity of the same name, ``accept`` refuses a name
    that already failed, and the first recorded error of a name wins.
    """

    def __init__(self, name_of: Callable[[T], str] | None = None) -> None:
        self.accepted: list[T] = []
        self.errors: dict[str, Exception] = {}
        self._name_of = name_of or (lambda entity: getattr(entity, "name", ""))

    def accept(self, name: str, entity: T, validate: Callable[[T], None] = validate_entity) -> bool:
        """Validate ``entity`` and file it; returns True when it was accepted."""
        if name in self.errors:
            logger.debug("Dropping %s: an earlier record of that name failed", name)
            return False
        try:
            validate(entity)
        except EntityValidationError as e:
            self.record(name, e)
            return False
        self.accepted.append(entity)
        return True

    def record(self, name: str, error: Exception) -> None:
        if name in self.errors:
            logger.debug("Keeping first error recorded for %s", name)
        else:
            self.errors[name] = error
        self.discard(name)

    def discard(self, name: str) -> None:
        self.accepted = [e for e in self.accepted if self._name_of(e) != name]

    def find(self, name: str) -> list[T]:
        return [e for e in self.accepted if self._name_of(e) == name]
