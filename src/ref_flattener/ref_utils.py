"""Reference string helpers: format detection, locations, pointers and URI joining."""

from enum import Enum
from typing import Any, Optional
from urllib.parse import SplitResult, unquote, urlsplit, urlunsplit

URL_PREFIXES = ("http://", "https://", "file:")


class RefFormat(Enum):
    """Where the target of a $ref lives."""

    INTERNAL = "internal"
    RELATIVE = "relative"
    URL = "url"


def compute_ref_format(ref: str) -> RefFormat:
    """
    Classify a reference by its syntax.

    Args:
        ref: Raw $ref string (e.g. "#/components/schemas/Pet", "./pet.yaml#/Pet")

    Returns:
        RefFormat for the reference
    """
    if ref.startswith("#"):
        return RefFormat.INTERNAL
    if ref.lower().startswith(URL_PREFIXES) or ref.startswith("/"):
        return RefFormat.URL
    if "." not in ref and "/" not in ref and "#" not in ref:
        # Legacy short form: a bare definition name in the same document
        return RefFormat.INTERNAL
    return RefFormat.RELATIVE


def is_external_ref_format(ref_format: RefFormat) -> bool:
    return ref_format in (RefFormat.RELATIVE, RefFormat.URL)


def is_url(location: str) -> bool:
    return location.lower().startswith(("http://", "https://"))


def ref_location(ref: str) -> str:
    """Return the document location part of a reference (everything before '#')."""
    return ref.split("#", 1)[0]


def ref_fragment(ref: str) -> str:
    """Return the JSON pointer part of a reference (everything after '#')."""
    _, _, fragment = ref.partition("#")
    return fragment


def local_ref(section: str, name: str) -> str:
    """Build a pointer into the document's own components section."""
    return f"#/components/{section}/{name}"


def get_ref(node: Any) -> Optional[str]:
    """Return the $ref string of a mapping, or None when it has none."""
    if isinstance(node, dict):
        ref = node.get("$ref")
        if isinstance(ref, str):
            return ref
    return None


def resolve_pointer(document: Any, pointer: str) -> Any:
    """
    Walk a JSON pointer through a parsed document.

    Args:
        document: Parsed document (dicts and lists)
        pointer: Fragment such as "/components/schemas/Pet"; empty means the whole document

    Returns:
        The addressed value, or None if the pointer does not resolve
    """
    pointer = unquote(pointer)
    if pointer in ("", "/"):
        return document

    current = document
    for token in pointer.lstrip("/").split("/"):
        token = token.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict):
            if token in current:
                current = current[token]
                continue
            # YAML loads unquoted keys such as `200:` as ints
            matches = [key for key in current if _key_text(key) == token]
            if not matches:
                return None
            current = current[matches[0]]
        elif isinstance(current, list):
            if not token.isdigit() or int(token) >= len(current):
                return None
            current = current[int(token)]
        else:
            return None
    return current


def _key_text(key: Any) -> str:
    if isinstance(key, bool):
        return str(key).lower()
    return str(key)


def join(source: str, fragment: str) -> str:
    """
    Resolve a reference found inside a document against that document's location.

    Follows RFC 3986 resolution and dot-segment normalization, except that leading
    ".." segments of relative paths are kept and a "./" prefix implied by a relative
    base survives normalization. Returns ``source`` unchanged if either string
    cannot be parsed.

    Args:
        source: Location of the containing document (e.g. "./specs/pet.yaml")
        fragment: Reference found in that document (e.g. "../common.yaml#/Error")

    Returns:
        The joined reference string
    """
    try:
        is_relative = source.startswith("/") or source.startswith(".")
        base = urlsplit(source)
        if base.path == "" and not source.endswith("/") and not fragment.startswith("/"):
            base = urlsplit(source + "/")

        ref = urlsplit(fragment)
        normalized = urlunsplit(_resolve(base, ref))
    except ValueError:
        return source

    if is_relative and normalized[:1].isalpha() and not urlsplit(normalized).scheme:
        return "./" + normalized
    return normalized


def _resolve(base: SplitResult, ref: SplitResult) -> tuple:
    if ref.scheme:
        return ref.scheme, ref.netloc, _normalize_path(ref.path), ref.query, ref.fragment

    if ref.netloc:
        return base.scheme, ref.netloc, _normalize_path(ref.path), ref.query, ref.fragment

    if not ref.path:
        return base.scheme, base.netloc, base.path, ref.query or base.query, ref.fragment

    if ref.path.startswith("/"):
        path = ref.path
    elif base.netloc and not base.path:
        path = "/" + ref.path
    else:
        path = base.path[: base.path.rfind("/") + 1] + ref.path
    return base.scheme, base.netloc, _normalize_path(path), ref.query, ref.fragment


def _normalize_path(path: str) -> str:
    """Remove '.' and 'segment/..' pairs; leading '..' of a relative path are kept."""
    if not path:
        return path

    absolute = path.startswith("/")
    segments = path.split("/")
    if absolute:
        segments = segments[1:]

    output = []
    for segment in segments:
        if segment == ".":
            continue
        if segment == "..":
            if output and output[-1] != "..":
                output.pop()
            elif not absolute:
                output.append("..")
            continue
        output.append(segment)

    # "dir/." and "dir/x/.." both name a directory
    if segments[-1] in (".", "..") and output and output[-1] not in ("", ".."):
        output.append("")

    normalized = "/".join(output)
    return "/" + normalized if absolute else normalized
