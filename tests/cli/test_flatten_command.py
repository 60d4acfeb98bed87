"""Tests for the flatten CLI command."""

import json
import os

import yaml

from src.cli.commands.flatten import render_document
from src.cli.config import Config
from src.cli.main import main
from tests.ref_flattener.test_helpers import schemas_document, write_documents


def write_project(root, pet_ref="./pets.yaml#/components/schemas/Pet"):
    write_documents(
        root,
        {
            "openapi.yaml": {
                "openapi": "3.0.3",
                "info": {"title": "Pets", "version": "1.0.0"},
                "components": {"schemas": {"Wrapper": {"type": "object", "properties": {"pet": {"$ref": pet_ref}}}}},
            },
            "pets.yaml": schemas_document(Pet={"type": "object"}),
        },
    )
    return root / "openapi.yaml"


class TestFlattenCommand:
    """Test cases for `openapi-flatten flatten`."""

    def test_writes_flattened_yaml(self, tmp_path):
        source = write_project(tmp_path)
        output = tmp_path / "flat.yaml"

        exit_code = main(["flatten", str(source), "-o", str(output)])

        flattened = yaml.safe_load(output.read_text(encoding="utf-8"))
        assert exit_code == 0
        assert flattened["components"]["schemas"]["Pet"] == {"type": "object"}
        assert flattened["components"]["schemas"]["Wrapper"]["properties"]["pet"] == {
            "$ref": "#/components/schemas/Pet"
        }

    def test_writes_json_to_stdout(self, tmp_path, capsys):
        source = write_project(tmp_path)

        exit_code = main(["flatten", str(source), "--format", "json"])

        flattened = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert "Pet" in flattened["components"]["schemas"]

    def test_json_output_with_date_example(self, tmp_path):
        """Test that YAML timestamps are written as ISO strings in JSON output."""
        source = tmp_path / "openapi.yaml"
        source.write_text(
            "openapi: 3.0.3\n"
            "components:\n"
            "  schemas:\n"
            "    Birthday:\n"
            "      type: string\n"
            "      format: date\n"
            "      example: 2020-01-01\n",
            encoding="utf-8",
        )
        output = tmp_path / "flat.json"

        exit_code = main(["flatten", str(source), "--format", "json", "-o", str(output)])

        flattened = json.loads(output.read_text(encoding="utf-8"))
        assert exit_code == 0
        assert flattened["components"]["schemas"]["Birthday"]["example"] == "2020-01-01"

    def test_missing_source(self, tmp_path):
        exit_code = main(["flatten", str(tmp_path / "missing.yaml"), "-o", str(tmp_path / "out.yaml")])

        assert exit_code == 1
        assert not (tmp_path / "out.yaml").exists()

    def test_strict_mode_fails_on_unresolved(self, tmp_path):
        source = write_project(tmp_path, pet_ref="./gone.yaml#/components/schemas/Pet")
        output = tmp_path / "flat.yaml"

        assert main(["flatten", str(source), "-o", str(output)]) == 0
        assert main(["flatten", str(source), "-o", str(output), "--strict"]) == 2

        flattened = yaml.safe_load(output.read_text(encoding="utf-8"))
        assert flattened["components"]["schemas"]["Wrapper"]["properties"]["pet"] == {
            "$ref": "./gone.yaml#/components/schemas/Pet"
        }

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "flatten" in capsys.readouterr().out


class TestConfig:
    """Test cases for Config."""

    def test_values_from_env_file(self, tmp_path, monkeypatch):
        names = ("FLATTEN_HTTP_TIMEOUT", "FLATTEN_OUTPUT_FORMAT", "FLATTEN_STRICT")
        for name in names:
            monkeypatch.delenv(name, raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("FLATTEN_HTTP_TIMEOUT=12\nFLATTEN_OUTPUT_FORMAT=JSON\nFLATTEN_STRICT=true\n")

        try:
            config = Config(str(env_file))

            assert config.http_timeout == 12.0
            assert config.output_format == "json"
            assert config.strict is True
        finally:
            # load_dotenv writes into os.environ
            for name in names:
                os.environ.pop(name, None)

    def test_render_yaml_keeps_key_order(self):
        text = render_document({"openapi": "3.0.3", "info": {"title": "x"}}, "yaml")

        assert text.index("openapi") < text.index("info")
