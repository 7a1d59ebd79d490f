"""Tests for the specir CLI (specir.app)."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from specir import __version__
from specir.app import app


@pytest.fixture(autouse=True)
def _isolated(isolated_config: Path) -> Path:
    return isolated_config


class TestVersion:
    """--version prints and exits."""

    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.stdout.strip() == f"specir {__version__}"


class TestProcessJson:
    """``--json process`` prints the IR document."""

    def test_operations_and_schemas(self, cli_runner, petstore_path: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "process", str(petstore_path)])

        assert result.exit_code == 0, result.output
        doc = json.loads(result.stdout)
        assert doc["title"] == "Petstore"
        assert [op["function_name"] for op in doc["operations"]][:3] == [
            "list_pets",
            "create_pet",
            "show_pet_by_id",
        ]
        assert "#/components/schemas/Pet" in doc["schemas"]
        assert doc["schemas"]["#/components/schemas/Pet"]["type_name"] == "Pet"

    def test_response_order_serialised(self, cli_runner, petstore_path: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "process", str(petstore_path)])

        doc = json.loads(result.stdout)
        show = next(op for op in doc["operations"] if op["function_name"] == "show_pet_by_id")
        assert [status for status, _ in show["responses"]] == [404, 200]

    def test_no_schemas(self, cli_runner, petstore_path: Path) -> None:
        result = cli_runner.invoke(
            app, ["--json", "process", str(petstore_path), "--no-schemas"]
        )

        assert result.exit_code == 0
        assert "schemas" not in json.loads(result.stdout)

    def test_base_module_and_ignore_flags(self, cli_runner, petstore_path: Path) -> None:
        result = cli_runner.invoke(
            app,
            [
                "--json",
                "process",
                str(petstore_path),
                "--base-module",
                "petstore",
                "--ignore",
                "^/internal",
            ],
        )

        doc = json.loads(result.stdout)
        modules = {op["module_name"] for op in doc["operations"]}
        assert modules == {"petstore.pets", "petstore.admin"}

    def test_project_config_applied(
        self, cli_runner, petstore_path: Path, isolated_config: Path
    ) -> None:
        (isolated_config / "specir.json").write_text(json.dumps({"base_module": "proj"}))
        result = cli_runner.invoke(app, ["--json", "process", str(petstore_path)])

        doc = json.loads(result.stdout)
        assert doc["operations"][0]["module_name"] == "proj.pets"

    def test_policy_flag(self, cli_runner, petstore_path: Path) -> None:
        result = cli_runner.invoke(
            app,
            ["--json", "process", str(petstore_path), "--policy", "specir.policy.base:Policy"],
        )
        assert result.exit_code == 0


class TestProcessPlain:
    """``--plain process`` prints tab-separated tables."""

    def test_tables(self, cli_runner, petstore_path: Path) -> None:
        result = cli_runner.invoke(app, ["--plain", "process", str(petstore_path)])

        assert result.exit_code == 0, result.output
        lines = result.stdout.splitlines()
        assert lines[0] == "Module\tFunction\tMethod\tPath\tParams\tRequest\tResponses"
        assert lines[1].startswith("pets\tlist_pets\tGET\t/pets\tlimit\t-\t")
        assert "200 [pet.Pet]" in lines[1]
        assert "Ref\tModule\tType\tFields" in lines

    def test_quiet_suppresses_summary(self, cli_runner, petstore_path: Path) -> None:
        result = cli_runner.invoke(app, ["--plain", "-q", "process", str(petstore_path)])
        assert "operations," not in result.output


class TestPolicies:
    """``policies`` lists the default and registered policies."""

    def test_lists_registered(self, cli_runner) -> None:
        with patch("specir.policy.manager.available_policies", return_value=["flat"]):
            result = cli_runner.invoke(app, ["--plain", "-q", "policies"])

        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == ["Policy", "default", "flat"]


class TestProcessErrors:
    """Errors map to exit codes."""

    def test_json_and_plain_conflict(self, cli_runner, petstore_path: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "--plain", "process", str(petstore_path)])

        assert result.exit_code == 2
        assert "--json and --plain cannot be used together" in result.output

    def test_missing_file(self, cli_runner, tmp_path: Path) -> None:
        result = cli_runner.invoke(app, ["process", str(tmp_path / "missing.json")])
        assert result.exit_code == 3

    def test_swagger_rejected(self, cli_runner, tmp_path: Path) -> None:
        path = tmp_path / "swagger.json"
        path.write_text(json.dumps({"swagger": "2.0", "paths": {}}))

        result = cli_runner.invoke(app, ["process", str(path)])
        assert result.exit_code == 3

    def test_unknown_policy(self, cli_runner, petstore_path: Path) -> None:
        result = cli_runner.invoke(
            app, ["process", str(petstore_path), "--policy", "no_such_module:Policy"]
        )
        assert result.exit_code == 5

    def test_invalid_config(self, cli_runner, petstore_path: Path, isolated_config: Path) -> None:
        (isolated_config / "specir.json").write_text("{oops")

        result = cli_runner.invoke(app, ["process", str(petstore_path)])
        assert result.exit_code == 1

    def test_dangling_reference(self, cli_runner, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text(
            json.dumps(
                {
                    "openapi": "3.0.3",
                    "info": {"title": "Broken", "version": "1"},
                    "paths": {},
                    "components": {
                        "schemas": {"Pet": {"$ref": "#/components/schemas/Missing"}}
                    },
                }
            )
        )

        result = cli_runner.invoke(app, ["process", str(path)])
        assert result.exit_code == 3
