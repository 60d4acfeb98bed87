"""Tests for OpenAPI Parser."""

import json
import tempfile
from pathlib import Path

from src.ref_flattener.parser import OpenAPIParser


class TestOpenAPIParser:
    """Test cases for OpenAPIParser."""

    def test_parse_valid_json_file(self):
        """Test parsing a valid JSON OpenAPI file."""
        test_data = {
            "openapi": "3.0.0",
            "info": {"title": "Test API", "version": "1.0.0"},
            "paths": {},
        }

        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            json.dump(test_data, f)
            temp_file = f.name

        try:
            parser = OpenAPIParser()
            result = parser.parse_file(temp_file)

            assert result.success is True
            assert result.data == test_data
            assert result.file_type == "json"
            assert result.error is None
        finally:
            Path(temp_file).unlink()

    def test_parse_valid_yaml_file(self):
        """Test parsing a valid YAML file."""
        content = "components:\n  schemas:\n    Pet:\n      type: object\n"

        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write(content)
            temp_file = f.name

        try:
            result = OpenAPIParser().parse_file(temp_file)

            assert result.success is True
            assert result.file_type == "yaml"
            assert result.data == {"components": {"schemas": {"Pet": {"type": "object"}}}}
        finally:
            Path(temp_file).unlink()

    def test_parse_invalid_json_file(self):
        """Test parsing an invalid JSON file."""
        invalid_json = '{"openapi": "3.0.0", "info": {'  # Missing closing braces

        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            f.write(invalid_json)
            temp_file = f.name

        try:
            parser = OpenAPIParser()
            result = parser.parse_file(temp_file)

            assert result.success is False
            assert result.data is None
            assert result.file_type == "json"
            assert "Invalid JSON format" in result.error
        finally:
            Path(temp_file).unlink()

    def test_parse_nonexistent_file(self):
        """Test parsing a file that doesn't exist."""
        parser = OpenAPIParser()
        result = parser.parse_file("/path/that/does/not/exist.json")

        assert result.success is False
        assert result.data is None
        assert "File not found" in result.error

    def test_parse_unsupported_file_extension(self):
        """Test parsing a file with unsupported extension."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".txt", delete=False) as f:
            f.write("some content")
            temp_file = f.name

        try:
            parser = OpenAPIParser()
            result = parser.parse_file(temp_file)

            assert result.success is False
            assert result.data is None
            assert "Unsupported file extension" in result.error
        finally:
            Path(temp_file).unlink()

    def test_parse_content_yaml(self):
        """Test parsing fetched YAML text."""
        result = OpenAPIParser().parse_content("openapi: 3.1.0\n", "yaml")

        assert result.success is True
        assert result.data == {"openapi": "3.1.0"}

    def test_parse_content_invalid_yaml(self):
        """Test that YAML errors are reported, not raised."""
        result = OpenAPIParser().parse_content("key: [unclosed\n", "yaml")

        assert result.success is False
        assert "Invalid YAML format" in result.error

    def test_file_type_for_locations(self):
        """Test guessing document type from paths and URLs."""
        parser = OpenAPIParser()

        assert parser.file_type_for("https://example.com/api.json") == "json"
        assert parser.file_type_for("./specs/pets.yml") == "yaml"
        assert parser.file_type_for("https://example.com/spec") == "yaml"
