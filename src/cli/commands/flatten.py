"""Flatten command - inlines external $ref targets into the document's components."""

import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from src.cli.config import Config
from src.ref_flattener.flattener import FlattenerConfig, RefFlattener

logger = logging.getLogger(__name__)

EXIT_LOAD_ERROR = 1
EXIT_UNRESOLVED = 2


def flatten_command(
    config: Config,
    source: str,
    output: Optional[str] = None,
    output_format: Optional[str] = None,
    strict: Optional[bool] = None,
) -> int:
    """Flatten the document at ``source`` and write it to ``output`` (stdout by default)."""
    output_format = output_format or config.output_format
    strict = config.strict if strict is None else strict

    logger.info(f"Flattening external references in: {source}")
    flattener = RefFlattener(FlattenerConfig.from_config(config))
    result = flattener.flatten_file(source)

    if not result.success:
        logger.error(f"Unable to read {source}: {result.error}")
        return EXIT_LOAD_ERROR

    for ref, name in result.resolved.items():
        logger.info(f"  {ref} -> {name}")
    for ref in result.unresolved:
        logger.warning(f"Unresolved reference left in place: {ref}")

    text = render_document(result.document, output_format)
    if output:
        Path(output).write_text(text, encoding="utf-8")
        logger.info(f"Wrote flattened document to {output}")
    else:
        sys.stdout.write(text)

    if strict and result.unresolved:
        logger.error(f"{len(result.unresolved)} references could not be resolved")
        return EXIT_UNRESOLVED
    return 0


def render_document(document: Dict[str, Any], output_format: str) -> str:
    """Serialize the flattened document as YAML or JSON."""
    if output_format == "json":
        return json.dumps(document, indent=2, default=_json_default) + "\n"
    return yaml.safe_dump(document, sort_keys=False, allow_unicode=True)


def _json_default(value: Any) -> Any:
    # yaml.safe_load turns unquoted timestamps into date/datetime
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
