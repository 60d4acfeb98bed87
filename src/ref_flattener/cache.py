"""Per-pass memo tables for external reference resolution."""

from typing import Any, Dict, Optional, Tuple

from .loader import DocumentLoader
from .models import DefinitionKind
from .ref_utils import RefFormat


class ResolverCache:
    """
    Memoizes resolution state for one flattening pass.

    Holds raw reference -> local name, raw reference -> loaded definition, and the
    names this pass has put into the namespace. A renamed reference is permanent:
    it is what stops repeated and cyclic references from being resolved twice.
    """

    def __init__(self, loader: DocumentLoader):
        self.loader = loader
        self._renamed_refs: Dict[str, str] = {}
        self._resolution_cache: Dict[Tuple[str, DefinitionKind], Any] = {}
        self._referenced_keys: Dict[Tuple[DefinitionKind, str], str] = {}

    def get_renamed_ref(self, ref: str) -> Optional[str]:
        return self._renamed_refs.get(ref)

    def put_renamed_ref(self, ref: str, name: str) -> None:
        self._renamed_refs[ref] = name

    @property
    def renamed_refs(self) -> Dict[str, str]:
        return dict(self._renamed_refs)

    def load_ref(self, ref: str, ref_format: RefFormat, kind: DefinitionKind) -> Optional[Any]:
        """Load a definition through the loader, reusing earlier loads of the same reference."""
        key = (ref, kind)
        if key in self._resolution_cache:
            return self._resolution_cache[key]

        definition = self.loader.load(ref, ref_format, kind)
        if definition is not None:
            self._resolution_cache[key] = definition
        return definition

    def source_key(self, ref: str, ref_format: RefFormat) -> str:
        return self.loader.source_key(ref, ref_format)

    def add_referenced_key(self, kind: DefinitionKind, name: str, source: str) -> None:
        """Record that this pass placed ``name`` in the namespace for ``source``."""
        self._referenced_keys[(kind, name)] = source

    def referenced_source(self, kind: DefinitionKind, name: str) -> Optional[str]:
        return self._referenced_keys.get((kind, name))
