"""External reference flattening for multi-file OpenAPI documents."""

from .cache import ResolverCache
from .external_ref_processor import ExternalRefProcessor
from .flattener import FlattenerConfig, FlattenResult, RefFlattener
from .loader import DocumentLoader
from .models import Callback, Components, DefinitionKind
from .naming import NameAllocator, definition_name
from .parser import OpenAPIParser, ParseResult
from .ref_utils import RefFormat, compute_ref_format, join

__all__ = [
    "Callback",
    "Components",
    "DefinitionKind",
    "DocumentLoader",
    "ExternalRefProcessor",
    "FlattenerConfig",
    "FlattenResult",
    "NameAllocator",
    "OpenAPIParser",
    "ParseResult",
    "RefFlattener",
    "RefFormat",
    "ResolverCache",
    "compute_ref_format",
    "definition_name",
    "join",
]
