"""Definition kinds, the callback variant and the shared components namespace."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional

from .ref_utils import get_ref


class DefinitionKind(Enum):
    """Reusable definition kinds; the value is the components section name."""

    SCHEMA = "schemas"
    RESPONSE = "responses"
    REQUEST_BODY = "requestBodies"
    HEADER = "headers"
    SECURITY_SCHEME = "securitySchemes"
    LINK = "links"
    EXAMPLE = "examples"
    PARAMETER = "parameters"
    CALLBACK = "callbacks"

    @property
    def section(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", " ")


@dataclass
class Callback:
    """
    A callback definition.

    Callbacks are maps of runtime expression -> path item, so a callback that is
    only a pointer keeps that pointer in its own slot instead of among the
    expressions.
    """

    ref: Optional[str] = None
    expressions: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Callback":
        expressions = dict(data)
        ref = get_ref(expressions)
        if ref is not None:
            del expressions["$ref"]
        return cls(ref=ref, expressions=expressions)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.ref is not None:
            data["$ref"] = self.ref
        data.update(self.expressions)
        return data


def _set_dict_alias(definition: Dict[str, Any], ref: str) -> None:
    definition["$ref"] = ref


def _get_callback_alias(definition: Any) -> Optional[str]:
    if isinstance(definition, Callback):
        return definition.ref
    # Callbacks written directly in the root document are still plain mappings
    return get_ref(definition)


def _set_callback_alias(definition: Any, ref: str) -> None:
    if isinstance(definition, Callback):
        definition.ref = ref
    else:
        definition["$ref"] = ref


@dataclass(frozen=True)
class KindDescriptor:
    """How the resolver loads, inspects and rewrites one definition kind."""

    kind: DefinitionKind
    coerce: Callable[[Dict[str, Any]], Any] = dict
    get_alias: Callable[[Any], Optional[str]] = get_ref
    set_alias: Callable[[Any, str], None] = _set_dict_alias
    walk_nested: bool = False


DESCRIPTORS: Dict[DefinitionKind, KindDescriptor] = {
    kind: KindDescriptor(kind=kind) for kind in DefinitionKind
}
DESCRIPTORS[DefinitionKind.SCHEMA] = KindDescriptor(kind=DefinitionKind.SCHEMA, walk_nested=True)
DESCRIPTORS[DefinitionKind.CALLBACK] = KindDescriptor(
    kind=DefinitionKind.CALLBACK,
    coerce=Callback.from_dict,
    get_alias=_get_callback_alias,
    set_alias=_set_callback_alias,
)


class Components:
    """Shared namespace backed by the document's ``components`` mapping."""

    def __init__(self, document: Dict[str, Any]):
        self.document = document

    def section(self, kind: DefinitionKind) -> Dict[str, Any]:
        """Return the namespace for a kind without creating it."""
        components = self.document.get("components")
        if not isinstance(components, dict):
            return {}
        section = components.get(kind.section)
        return section if isinstance(section, dict) else {}

    def get(self, kind: DefinitionKind, name: str) -> Any:
        return self.section(kind).get(name)

    def add(self, kind: DefinitionKind, name: str, definition: Any) -> None:
        components = self.document.get("components")
        if not isinstance(components, dict):
            components = self.document["components"] = {}
        section = components.get(kind.section)
        if not isinstance(section, dict):
            section = components[kind.section] = {}
        section[name] = definition

    def export(self) -> Dict[str, Any]:
        """Convert callback variants back to plain mappings and return the document."""
        callbacks = self.section(DefinitionKind.CALLBACK)
        for name, callback in callbacks.items():
            if isinstance(callback, Callback):
                callbacks[name] = callback.to_dict()
        return self.document
