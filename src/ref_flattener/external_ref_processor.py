"""External Reference Processor: copies external definitions into the document's components."""

import logging
from typing import Any, Dict, List, Optional

from .cache import ResolverCache
from .models import DESCRIPTORS, Components, DefinitionKind
from .naming import NameAllocator
from .ref_utils import (
    RefFormat,
    compute_ref_format,
    get_ref,
    is_external_ref_format,
    join,
    local_ref,
    ref_location,
)

logger = logging.getLogger(__name__)


class ExternalRefProcessor:
    """
    Resolves external references for one document.

    Each resolved definition is stored once under a local name in the document's
    components and the raw reference is remembered, so asking again (including from
    inside a reference cycle) returns the same name without loading anything.
    """

    def __init__(
        self,
        cache: ResolverCache,
        document: Dict[str, Any],
        allocator: Optional[NameAllocator] = None,
    ):
        self.cache = cache
        self.components = Components(document)
        self.allocator = allocator or NameAllocator()
        self.unresolved_refs: List[str] = []

    def process_ref_to_external(self, ref: str, ref_format: RefFormat, kind: DefinitionKind) -> str:
        """
        Flatten one external reference.

        Args:
            ref: Raw external reference (e.g. "./common.yaml#/components/schemas/Error")
            ref_format: RELATIVE or URL
            kind: Kind of definition the reference is expected to point at

        Returns:
            Local name in the components section for ``kind``, or ``ref`` unchanged
            if the target could not be loaded
        """
        renamed_ref = self.cache.get_renamed_ref(ref)
        if renamed_ref is not None:
            return renamed_ref

        definition = self.cache.load_ref(ref, ref_format, kind)
        if definition is None:
            logger.warning(
                f"Unable to load {kind.label} reference from `{ref}`. It may not be available "
                f"or the reference isn't a valid {kind.label}"
            )
            if ref not in self.unresolved_refs:
                self.unresolved_refs.append(ref)
            return ref

        descriptor = DESCRIPTORS[kind]
        source = self.cache.source_key(ref, ref_format)
        name = self.allocator.allocate(
            ref,
            self.components.section(kind),
            lambda candidate, occupant: self._is_reusable(kind, candidate, occupant, definition, source),
        )

        existing = self.components.get(kind, name)
        if existing is not None:
            logger.debug(f"A {kind.label} named {name} already exists")
            if descriptor.get_alias(existing) is not None:
                # a bare pointer does not count as a definition; replace it
                existing = None

        self.cache.put_renamed_ref(ref, name)

        if existing is None:
            self.components.add(kind, name, definition)
            self.cache.add_referenced_key(kind, name, source)

            location = ref_location(ref)
            alias = descriptor.get_alias(definition)
            if alias is not None:
                self._process_alias(definition, alias, location, kind)
            if descriptor.walk_nested:
                self._process_nested_refs(definition, location)

        return name

    def process_ref_to_external_schema(self, ref: str, ref_format: RefFormat) -> str:
        return self.process_ref_to_external(ref, ref_format, DefinitionKind.SCHEMA)

    def process_ref_to_external_response(self, ref: str, ref_format: RefFormat) -> str:
        return self.process_ref_to_external(ref, ref_format, DefinitionKind.RESPONSE)

    def process_ref_to_external_request_body(self, ref: str, ref_format: RefFormat) -> str:
        return self.process_ref_to_external(ref, ref_format, DefinitionKind.REQUEST_BODY)

    def process_ref_to_external_header(self, ref: str, ref_format: RefFormat) -> str:
        return self.process_ref_to_external(ref, ref_format, DefinitionKind.HEADER)

    def process_ref_to_external_security_scheme(self, ref: str, ref_format: RefFormat) -> str:
        return self.process_ref_to_external(ref, ref_format, DefinitionKind.SECURITY_SCHEME)

    def process_ref_to_external_link(self, ref: str, ref_format: RefFormat) -> str:
        return self.process_ref_to_external(ref, ref_format, DefinitionKind.LINK)

    def process_ref_to_external_example(self, ref: str, ref_format: RefFormat) -> str:
        return self.process_ref_to_external(ref, ref_format, DefinitionKind.EXAMPLE)

    def process_ref_to_external_parameter(self, ref: str, ref_format: RefFormat) -> str:
        return self.process_ref_to_external(ref, ref_format, DefinitionKind.PARAMETER)

    def process_ref_to_external_callback(self, ref: str, ref_format: RefFormat) -> str:
        return self.process_ref_to_external(ref, ref_format, DefinitionKind.CALLBACK)

    def _is_reusable(
        self, kind: DefinitionKind, name: str, occupant: Any, definition: Any, source: str
    ) -> bool:
        """An occupied name may be reused by an alias slot or by the same target."""
        if DESCRIPTORS[kind].get_alias(occupant) is not None:
            return True
        if self.cache.referenced_source(kind, name) == source:
            return True
        return occupant == definition

    def _process_alias(self, definition: Any, alias: str, location: str, kind: DefinitionKind) -> None:
        """Follow a definition whose whole body is another reference."""
        alias_format = compute_ref_format(alias)
        if is_external_ref_format(alias_format):
            target = alias
        else:
            target = location + self._as_pointer(alias, kind)
            alias_format = RefFormat.RELATIVE

        name = self.process_ref_to_external(target, alias_format, kind)
        if name != target:
            DESCRIPTORS[kind].set_alias(definition, local_ref(kind.section, name))
        else:
            # keep the pointer anchored to the document it came from
            DESCRIPTORS[kind].set_alias(definition, target)

    def _process_nested_refs(self, schema: Dict[str, Any], location: str) -> None:
        """Resolve references in properties, additionalProperties and array items."""
        properties = schema.get("properties")
        if isinstance(properties, dict):
            for prop in properties.values():
                if not isinstance(prop, dict):
                    continue
                if get_ref(prop) is not None:
                    self._process_ref_property(prop, location)
                elif _is_array(prop):
                    self._process_array_items(prop, location)
                elif _is_map(prop):
                    self._process_map_values(prop, location)

        additional = schema.get("additionalProperties")
        if isinstance(additional, dict):
            if get_ref(additional) is not None:
                self._process_ref_property(additional, location)
            elif _is_array(additional):
                self._process_array_items(additional, location)
            elif _is_map(additional):
                self._process_map_values(additional, location)

        if _is_array(schema):
            self._process_array_items(schema, location)

    def _process_array_items(self, array_schema: Dict[str, Any], location: str) -> None:
        items = array_schema.get("items")
        if get_ref(items) is not None:
            self._process_ref_property(items, location)

    def _process_map_values(self, map_schema: Dict[str, Any], location: str) -> None:
        values = map_schema["additionalProperties"]
        if get_ref(values) is not None:
            self._process_ref_property(values, location)
        elif _is_array(values):
            self._process_array_items(values, location)

    def _process_ref_property(self, sub_schema: Dict[str, Any], location: str) -> None:
        """Re-anchor a nested reference on its containing document and resolve it."""
        ref = sub_schema["$ref"]
        if is_external_ref_format(compute_ref_format(ref)):
            target = join(location, ref)
            sub_schema["$ref"] = target
            target_format = RefFormat.RELATIVE if target.startswith(".") else RefFormat.URL
        else:
            target = location + self._as_pointer(ref, DefinitionKind.SCHEMA)
            target_format = RefFormat.RELATIVE

        name = self.process_ref_to_external_schema(target, target_format)
        if name != target:
            sub_schema["$ref"] = local_ref(DefinitionKind.SCHEMA.section, name)

    @staticmethod
    def _as_pointer(ref: str, kind: DefinitionKind) -> str:
        """Expand the bare-name short form into a components pointer."""
        if ref.startswith("#"):
            return ref
        return local_ref(kind.section, ref)


def _is_array(schema: Dict[str, Any]) -> bool:
    schema_type = schema.get("type")
    if schema_type == "array" or (isinstance(schema_type, list) and "array" in schema_type):
        return True
    return isinstance(schema.get("items"), dict)


def _is_map(schema: Dict[str, Any]) -> bool:
    return isinstance(schema.get("additionalProperties"), dict)
