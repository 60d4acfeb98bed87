"""OpenAPI Parser for JSON and YAML documents."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Union
from urllib.parse import urlsplit

import yaml


@dataclass
class ParseResult:
    """Result of parsing an OpenAPI document."""

    success: bool
    data: Dict[str, Any] = None
    error: str = None
    file_type: str = None  # 'json' or 'yaml'


class OpenAPIParser:
    """Parses OpenAPI documents in JSON or YAML format."""

    def parse_file(self, file_path: Union[str, Path]) -> ParseResult:
        """
        Parse an OpenAPI document from disk.

        Args:
            file_path: Path to the document (.json, .yaml, .yml)

        Returns:
            ParseResult with parsed data or error information
        """
        file_path = Path(file_path)

        if not file_path.exists():
            return ParseResult(success=False, error=f"File not found: {file_path}")

        if not file_path.is_file():
            return ParseResult(success=False, error=f"Path is not a file: {file_path}")

        try:
            content = file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            return ParseResult(success=False, error=f"Unable to read file as UTF-8: {e}")
        except OSError as e:
            return ParseResult(success=False, error=f"Error reading file: {e}")

        file_type = self._get_file_type(file_path.suffix)
        if file_type == "unknown":
            return ParseResult(success=False, error=f"Unsupported file extension: {file_path.suffix}")

        return self.parse_content(content, file_type)

    def parse_content(self, content: str, file_type: str = "yaml") -> ParseResult:
        """
        Parse document text that was fetched elsewhere (e.g. over HTTP).

        Args:
            content: Raw document text
            file_type: 'json' or 'yaml'; YAML also accepts JSON text

        Returns:
            ParseResult with parsed data or error information
        """
        if file_type == "json":
            return self._parse_json(content, file_type)
        return self._parse_yaml(content, "yaml")

    def file_type_for(self, location: str) -> str:
        """Guess the document type of a path or URL; unknown locations parse as YAML."""
        suffix = Path(urlsplit(location).path).suffix
        file_type = self._get_file_type(suffix)
        return "yaml" if file_type == "unknown" else file_type

    def _get_file_type(self, suffix: str) -> str:
        """Determine file type from extension."""
        extension = suffix.lower()
        if extension == ".json":
            return "json"
        elif extension in [".yaml", ".yml"]:
            return "yaml"
        else:
            return "unknown"

    def _parse_json(self, content: str, file_type: str) -> ParseResult:
        """Parse JSON content."""
        try:
            data = json.loads(content)
            return ParseResult(success=True, data=data, file_type=file_type)
        except json.JSONDecodeError as e:
            return ParseResult(success=False, error=f"Invalid JSON format: {e}", file_type=file_type)

    def _parse_yaml(self, content: str, file_type: str) -> ParseResult:
        """Parse YAML content."""
        try:
            data = yaml.safe_load(content)
            return ParseResult(success=True, data=data, file_type=file_type)
        except yaml.YAMLError as e:
            return ParseResult(success=False, error=f"Invalid YAML format: {e}", file_type=file_type)
