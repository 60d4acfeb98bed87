"""Document loader for external $ref targets (local files and URLs)."""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import unquote, urljoin, urlsplit

import requests

from .models import DESCRIPTORS, DefinitionKind
from .parser import OpenAPIParser
from .ref_utils import RefFormat, is_url, ref_fragment, ref_location, resolve_pointer

logger = logging.getLogger(__name__)


class DocumentLoader:
    """Fetches, parses and caches the documents that external references point into."""

    def __init__(
        self,
        base_location: Optional[str] = None,
        parser: Optional[OpenAPIParser] = None,
        timeout: float = 30.0,
    ):
        """
        Args:
            base_location: Path or URL of the root document; relative references are
                resolved against its directory. Defaults to the working directory.
            parser: Deserializer for fetched documents
            timeout: HTTP timeout in seconds for URL references
        """
        self.base_location = base_location
        self.parser = parser or OpenAPIParser()
        self.timeout = timeout
        self._documents: Dict[str, Optional[Any]] = {}

    def resolve_location(self, location: str, ref_format: RefFormat = RefFormat.RELATIVE) -> str:
        """
        Turn the location part of a reference into a fetchable path or URL.

        Args:
            location: Location part of a reference (e.g. "./common.yaml")
            ref_format: Format of the reference the location came from

        Returns:
            Absolute URL, or a normalized file system path
        """
        if is_url(location):
            return location
        if location.lower().startswith("file:"):
            return os.path.normpath(unquote(urlsplit(location).path))
        if os.path.isabs(location):
            return os.path.normpath(location)

        if ref_format is RefFormat.URL:
            logger.debug(f"Treating `{location}` as a path relative to the root document")

        base = self.base_location
        if base and is_url(base):
            return urljoin(base, location)
        base_dir = Path(base).parent if base else Path(".")
        return os.path.normpath(str(base_dir / location))

    def source_key(self, ref: str, ref_format: RefFormat) -> str:
        """Identify the definition a reference points at, independent of how it is spelled."""
        location = self.resolve_location(ref_location(ref), ref_format)
        return f"{location}#{ref_fragment(ref)}"

    def load_document(self, resolved_location: str) -> Optional[Any]:
        """
        Fetch and parse a whole document; results (including failures) are cached.

        Args:
            resolved_location: Output of resolve_location

        Returns:
            Parsed document, or None if it could not be fetched or parsed
        """
        if resolved_location in self._documents:
            return self._documents[resolved_location]

        document = self._fetch(resolved_location)
        self._documents[resolved_location] = document
        return document

    def load(self, ref: str, ref_format: RefFormat, kind: DefinitionKind) -> Optional[Any]:
        """
        Load the definition a reference points at.

        Args:
            ref: External reference (e.g. "./pets.yaml#/components/schemas/Pet")
            ref_format: RELATIVE or URL
            kind: Expected definition kind

        Returns:
            A private copy of the definition, or None if the target is missing,
            unreachable or not a mapping
        """
        location = ref_location(ref)
        if not location:
            logger.warning(f"Reference `{ref}` has no document location to load from")
            return None

        document = self.load_document(self.resolve_location(location, ref_format))
        if document is None:
            return None

        target = resolve_pointer(document, ref_fragment(ref))
        if target is None:
            logger.warning(f"Nothing found at `{ref}`")
            return None
        if not isinstance(target, dict):
            logger.warning(f"`{ref}` does not point at a {kind.label} object")
            return None

        return DESCRIPTORS[kind].coerce(copy.deepcopy(target))

    def _fetch(self, resolved_location: str) -> Optional[Any]:
        if is_url(resolved_location):
            try:
                response = requests.get(resolved_location, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as e:
                logger.warning(f"Unable to fetch {resolved_location}: {e}")
                return None
            result = self.parser.parse_content(response.text, self.parser.file_type_for(resolved_location))
        else:
            result = self.parser.parse_file(resolved_location)

        if not result.success:
            logger.warning(f"Unable to load {resolved_location}: {result.error}")
            return None

        logger.debug(f"Loaded {resolved_location}")
        return result.data
