"""Document flattener: finds external references in a root document and flattens them."""

import copy
import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .cache import ResolverCache
from .external_ref_processor import ExternalRefProcessor
from .loader import DocumentLoader
from .models import DefinitionKind
from .parser import OpenAPIParser
from .ref_utils import compute_ref_format, get_ref, is_external_ref_format, is_url, local_ref

if TYPE_CHECKING:
    from ..cli.config import Config

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")
SCHEMA_MAP_KEYWORDS = ("properties", "patternProperties", "definitions", "$defs")
SCHEMA_KEYWORDS = ("items", "additionalProperties", "additionalItems", "not", "contains", "propertyNames")
SCHEMA_LIST_KEYWORDS = ("allOf", "anyOf", "oneOf", "prefixItems")


@dataclass
class FlattenResult:
    """Outcome of flattening one document."""

    document: Optional[Dict[str, Any]] = None
    resolved: Dict[str, str] = field(default_factory=dict)  # raw ref -> local name
    unresolved: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def fully_resolved(self) -> bool:
        return self.success and not self.unresolved


@dataclass
class FlattenerConfig:
    """Configuration for reference flattening."""

    http_timeout: float = 30.0
    log_progress: bool = True

    @classmethod
    def from_env(cls) -> "FlattenerConfig":
        """Create configuration from environment variables."""
        return cls(
            http_timeout=float(os.getenv("FLATTEN_HTTP_TIMEOUT", "30")),
            log_progress=os.getenv("LOG_PROCESSING_PROGRESS", "true").lower() == "true",
        )

    @classmethod
    def from_config(cls, config: "Config") -> "FlattenerConfig":
        """Create config from Config object."""
        return cls(http_timeout=config.http_timeout, log_progress=config.log_processing_progress)


class RefFlattener:
    """Rewrites every external $ref of a document into a pointer at its own components."""

    def __init__(self, config: FlattenerConfig = None, parser: OpenAPIParser = None):
        self.config = config or FlattenerConfig()
        self.parser = parser or OpenAPIParser()

    def flatten_file(self, source: str) -> FlattenResult:
        """
        Parse a root document from a path or URL and flatten it.

        Args:
            source: File path or http(s) URL of the root document

        Returns:
            FlattenResult; ``error`` is set if the root document could not be read
        """
        loader = self._create_loader(source)
        if is_url(source):
            document = loader.load_document(source)
            if document is None:
                return FlattenResult(error=f"Unable to load {source}")
            document = copy.deepcopy(document)
        else:
            parse_result = self.parser.parse_file(source)
            if not parse_result.success:
                return FlattenResult(error=parse_result.error)
            document = parse_result.data

        return self.flatten(document, source, loader=loader)

    def flatten(
        self,
        document: Dict[str, Any],
        base_location: Optional[str] = None,
        loader: Optional[DocumentLoader] = None,
    ) -> FlattenResult:
        """
        Flatten an already parsed document in place.

        Args:
            document: Parsed root document
            base_location: Path or URL the document was read from
            loader: Loader to use instead of a fresh one for ``base_location``

        Returns:
            FlattenResult holding the same document object
        """
        if not isinstance(document, dict):
            return FlattenResult(error="Document must be a mapping")

        cache = ResolverCache(loader or self._create_loader(base_location))
        processor = ExternalRefProcessor(cache, document)
        _DocumentWalker(processor).walk(document)
        processor.components.export()

        result = FlattenResult(
            document=document,
            resolved=cache.renamed_refs,
            unresolved=list(processor.unresolved_refs),
        )
        if self.config.log_progress:
            logger.info(
                f"Flattened {len(result.resolved)} external references"
                f" ({len(result.unresolved)} unresolved)"
            )
        return result

    def _create_loader(self, base_location: Optional[str]) -> DocumentLoader:
        return DocumentLoader(base_location, parser=self.parser, timeout=self.config.http_timeout)


class _DocumentWalker:
    """Visits the root document, telling the processor which kind each $ref expects."""

    def __init__(self, processor: ExternalRefProcessor):
        self.processor = processor

    def walk(self, document: Dict[str, Any]) -> None:
        # Only the definitions present up front; the processor flattens what it adds
        components = _mapping(document.get("components"))
        sections = {kind: list(_mapping(components.get(kind.section)).values()) for kind in DefinitionKind}
        path_items = list(_mapping(components.get("pathItems")).values())

        for key in ("paths", "webhooks"):
            for path_item in _mapping(document.get(key)).values():
                self._walk_path_item(path_item)

        for kind, definitions in sections.items():
            for definition in definitions:
                self._walk(definition, kind)
        for path_item in path_items:
            self._walk_path_item(path_item)

    def _walk(self, node: Any, kind: DefinitionKind) -> None:
        if not isinstance(node, dict):
            return
        if self._rewrite_ref(node, kind):
            return

        if kind is DefinitionKind.SCHEMA:
            self._walk_schema(node)
        elif kind in (DefinitionKind.PARAMETER, DefinitionKind.HEADER):
            self._walk(node.get("schema"), DefinitionKind.SCHEMA)
            self._walk_content(node.get("content"))
            self._walk_map(node.get("examples"), DefinitionKind.EXAMPLE)
        elif kind is DefinitionKind.REQUEST_BODY:
            self._walk_content(node.get("content"))
        elif kind is DefinitionKind.RESPONSE:
            self._walk_map(node.get("headers"), DefinitionKind.HEADER)
            self._walk_content(node.get("content"))
            self._walk_map(node.get("links"), DefinitionKind.LINK)
        elif kind is DefinitionKind.CALLBACK:
            for path_item in node.values():
                self._walk_path_item(path_item)

    def _rewrite_ref(self, node: Dict[str, Any], kind: DefinitionKind) -> bool:
        """Flatten ``node`` if it is an external reference; True if it was a reference at all."""
        ref = get_ref(node)
        if ref is None:
            return False

        ref_format = compute_ref_format(ref)
        if is_external_ref_format(ref_format):
            name = self.processor.process_ref_to_external(ref, ref_format, kind)
            if name != ref:
                node["$ref"] = local_ref(kind.section, name)
        return True

    def _walk_path_item(self, path_item: Any) -> None:
        if not isinstance(path_item, dict):
            return
        self._walk_list(path_item.get("parameters"), DefinitionKind.PARAMETER)
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if isinstance(operation, dict):
                self._walk_operation(operation)

    def _walk_operation(self, operation: Dict[str, Any]) -> None:
        self._walk_list(operation.get("parameters"), DefinitionKind.PARAMETER)
        self._walk(operation.get("requestBody"), DefinitionKind.REQUEST_BODY)
        self._walk_map(operation.get("responses"), DefinitionKind.RESPONSE)
        self._walk_map(operation.get("callbacks"), DefinitionKind.CALLBACK)

    def _walk_content(self, content: Any) -> None:
        for media_type in _mapping(content).values():
            if not isinstance(media_type, dict):
                continue
            self._walk(media_type.get("schema"), DefinitionKind.SCHEMA)
            self._walk_map(media_type.get("examples"), DefinitionKind.EXAMPLE)
            for encoding in _mapping(media_type.get("encoding")).values():
                if isinstance(encoding, dict):
                    self._walk_map(encoding.get("headers"), DefinitionKind.HEADER)

    def _walk_schema(self, schema: Dict[str, Any]) -> None:
        for keyword in SCHEMA_MAP_KEYWORDS:
            self._walk_map(schema.get(keyword), DefinitionKind.SCHEMA)
        for keyword in SCHEMA_KEYWORDS:
            self._walk(schema.get(keyword), DefinitionKind.SCHEMA)
        for keyword in SCHEMA_LIST_KEYWORDS:
            self._walk_list(schema.get(keyword), DefinitionKind.SCHEMA)

    def _walk_map(self, values: Any, kind: DefinitionKind) -> None:
        for value in _mapping(values).values():
            self._walk(value, kind)

    def _walk_list(self, values: Any, kind: DefinitionKind) -> None:
        if isinstance(values, list):
            for value in values:
                self._walk(value, kind)


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}
