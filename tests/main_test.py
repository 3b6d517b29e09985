#!/usr/bin/env python3
"""
Tests for the main CLI script.
"""
import json
import pytest
import tempfile
from pathlib import Path
from unittest import mock

# autopep8: off
from utils import setup
setup()
from fluent_schema.cli import main, load_json, load_schema
# autopep8: on

SCHEMA_MODULE = '''
from fluent_schema import number, object_, string

person = object_({
    "name": string().required(),
    "age": number().integer().min(0),
})

strict_person = person.error(ValueError("person rejected"))

literal = {"name": "John Doe", "age": number()}
'''


@pytest.fixture
def valid_data():
    """Create valid data for testing."""
    return {
        "name": "John Doe",
        "age": 30
    }


@pytest.fixture
def invalid_data():
    """Create invalid data for testing."""
    return {
        "name": 123,  # Wrong type
        "age": -5     # Below minimum
    }


@pytest.fixture
def temp_files(valid_data, invalid_data, monkeypatch):
    """Create temporary files and a schema module for testing."""
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_dir_path = Path(temp_dir)

        # Create schema module
        schema_module = temp_dir_path / "cli_test_schemas.py"
        schema_module.write_text(SCHEMA_MODULE, encoding="utf-8")
        monkeypatch.syspath_prepend(str(temp_dir_path))

        files = {
            "temp_dir": temp_dir_path,
            "valid_data_file": temp_dir_path / "valid_data.json",
            "invalid_data_file": temp_dir_path / "invalid_data.json",
            "unknown_data_file": temp_dir_path / "unknown_data.json",
            "string_age_file": temp_dir_path / "string_age.json",
            "language_file": temp_dir_path / "language.json",
            "invalid_json_file": temp_dir_path / "invalid_json.json",
        }
        contents = {
            "valid_data_file": valid_data,
            "invalid_data_file": invalid_data,
            "unknown_data_file": {"name": "John Doe", "extra": True},
            "string_age_file": {"name": "John Doe", "age": "30"},
            "language_file": {"string": {"base": "should be text"}},
        }
        for name, content in contents.items():
            with open(files[name], "w", encoding="utf-8") as f:
                json.dump(content, f)

        # Create a file with invalid JSON
        with open(files["invalid_json_file"], "w", encoding="utf-8") as f:
            f.write("{invalid json")

        yield files


def run(temp_files, data_file, *flags, schema="cli_test_schemas:person"):
    return main([str(temp_files[data_file]), schema, *flags])


def test_load_json_valid(temp_files):
    """Test loading a valid JSON file."""
    data = load_json(temp_files["valid_data_file"])
    assert isinstance(data, dict)
    assert data["name"] == "John Doe"


def test_load_json_file_not_found():
    """Test loading a non-existent JSON file."""
    with pytest.raises(FileNotFoundError):
        load_json("non_existent.json")


def test_load_json_invalid_json(temp_files):
    """Test loading a file with invalid JSON."""
    with pytest.raises(json.JSONDecodeError):
        load_json(temp_files["invalid_json_file"])


def test_load_schema(temp_files):
    """Test importing a schema given as module:attribute."""
    schema = load_schema("cli_test_schemas:person")
    assert schema.kind == "object"
    assert isinstance(load_schema("cli_test_schemas:literal"), dict)

    with pytest.raises(ValueError):
        load_schema("cli_test_schemas")
    with pytest.raises(AttributeError):
        load_schema("cli_test_schemas:missing")
    with pytest.raises(ImportError):
        load_schema("no_such_schema_module:person")


def test_main_valid_data(temp_files):
    """Test main function with valid data."""
    with mock.patch("sys.argv", ["fluent-schema",
                                 str(temp_files["valid_data_file"]),
                                 "cli_test_schemas:person"]):
        exit_code = main()
    assert exit_code == 0


def test_main_literal_schema(temp_files):
    """Test main function with a structural literal as schema."""
    assert run(temp_files, "valid_data_file", schema="cli_test_schemas:literal") == 0


def test_main_invalid_data(temp_files, capsys):
    """Test main function with invalid data."""
    exit_code = run(temp_files, "invalid_data_file", "--colorless")
    assert exit_code == 1

    output = capsys.readouterr().out
    assert '"name" [1]: 123' in output
    assert '[1] "name" must be a string' in output
    assert "age" in output


def test_main_json_output(temp_files, capsys):
    """Test main function printing the error as JSON."""
    exit_code = run(temp_files, "invalid_data_file", "--json", "--no-abort-early")
    assert exit_code == 1

    report = json.loads(capsys.readouterr().out)
    assert report["message"] == (
        'child "name" fails because ["name" must be a string]. '
        'child "age" fails because ["age" must be larger than or equal to 0]'
    )
    assert [detail["path"] for detail in report["details"]] == ["name", "age"]
    assert report["details"][1]["type"] == "number.min"
    assert report["details"][1]["context"] == {"limit": 0, "value": -5, "key": "age"}


def test_main_unknown_keys(temp_files):
    """Test main function with undeclared keys."""
    assert run(temp_files, "unknown_data_file") == 1
    assert run(temp_files, "unknown_data_file", "--allow-unknown") == 0
    assert run(temp_files, "unknown_data_file", "--strip-unknown") == 0


def test_main_no_convert(temp_files):
    """Test main function with conversion disabled."""
    assert run(temp_files, "string_age_file") == 0
    assert run(temp_files, "string_age_file", "--no-convert") == 1


def test_main_language(temp_files, capsys):
    """Test main function with a language file."""
    exit_code = run(temp_files, "invalid_data_file", "--json", "--language", str(temp_files["language_file"]))
    assert exit_code == 1

    report = json.loads(capsys.readouterr().out)
    assert report["message"] == 'child "name" fails because ["name" should be text]'


def test_main_caller_error(temp_files):
    """Test main function with a schema reporting its own exception."""
    assert run(temp_files, "invalid_data_file", schema="cli_test_schemas:strict_person") == 1


def test_main_invalid_json(temp_files):
    """Test main function with invalid JSON."""
    assert run(temp_files, "invalid_json_file") == 2


def test_main_file_not_found(temp_files):
    """Test main function with non-existent file."""
    assert main(["non_existent.json", "cli_test_schemas:person"]) == 2


def test_main_schema_not_found(temp_files):
    """Test main function with schemas that cannot be loaded."""
    assert run(temp_files, "valid_data_file", schema="cli_test_schemas") == 2
    assert run(temp_files, "valid_data_file", schema="cli_test_schemas:missing") == 2
    assert run(temp_files, "valid_data_file", schema="no_such_schema_module:person") == 2


def test_main_verbose(temp_files):
    """Test main function with verbose flag."""
    assert run(temp_files, "valid_data_file", "--verbose") == 0


def test_main_version(capsys):
    """Test the version flag."""
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert "1.0.0" in capsys.readouterr().out


if __name__ == "__main__":
    pytest.main(["-xvs", __file__])
