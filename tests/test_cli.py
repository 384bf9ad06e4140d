"""Tests for the envloader CLI (check, create-dirs, show, export, describe)."""

import json
import os
import sys
import textwrap
import uuid
from unittest.mock import patch

import pytest
import yaml

from envloader.cli import TargetError, load_declarations, run


@pytest.fixture
def settings_module(tmp_path, monkeypatch):
    """Write an importable settings module and return its import name."""
    name = f"envloader_settings_{uuid.uuid4().hex[:8]}"
    missing = tmp_path / "cache"
    (tmp_path / f"{name}.py").write_text(textwrap.dedent(f"""\
        ENVIRONMENT = {{
            "APP_ENV": "development",
            "WORKERS": 4,
            "DEBUG": False,
            "HOSTS": ["a", "b"],
            "CACHE_DIR": {{
                "value": {str(missing)!r},
                "isDirectory": True,
                "description": "Where cached responses are written.",
            }},
            "API_KEY": {{"value": "", "required": True}},
        }}

        NOT_A_MAPPING = 3
    """))
    monkeypatch.syspath_prepend(str(tmp_path))
    yield name, missing
    sys.modules.pop(name, None)


@pytest.fixture
def clean_env():
    """Make sure none of the settings variables leak in from the real environment."""
    keys = ["APP_ENV", "WORKERS", "DEBUG", "HOSTS", "CACHE_DIR", "API_KEY"]
    saved = {k: os.environ.pop(k) for k in keys if k in os.environ}
    yield
    os.environ.update(saved)


class TestLoadDeclarations:
    """Tests for load_declarations()."""

    def test_loads_mapping(self, settings_module):
        name, _ = settings_module

        declarations = load_declarations(f"{name}:ENVIRONMENT")

        assert declarations["WORKERS"] == 4

    @pytest.mark.parametrize("target", ["no-colon", ":ATTR", "module:"])
    def test_malformed_target(self, target):
        with pytest.raises(TargetError):
            load_declarations(target)

    def test_missing_module(self):
        with pytest.raises(TargetError, match="Could not import"):
            load_declarations("envloader_no_such_module_xyz:ENVIRONMENT")

    def test_missing_attribute(self, settings_module):
        name, _ = settings_module

        with pytest.raises(TargetError, match="no attribute"):
            load_declarations(f"{name}:MISSING")

    def test_imports_from_working_directory(self, tmp_path, monkeypatch):
        """A settings module in the cwd is found without touching PYTHONPATH."""
        name = f"envloader_cwd_{uuid.uuid4().hex[:8]}"
        (tmp_path / f"{name}.py").write_text('ENV = {"PORT": 80}\n')
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(
            sys, "path", [p for p in sys.path if p not in ("", ".", str(tmp_path))]
        )

        try:
            declarations = load_declarations(f"{name}:ENV")
        finally:
            sys.modules.pop(name, None)

        assert declarations == {"PORT": 80}
        assert sys.path[0] == str(tmp_path)

    def test_not_a_mapping(self, settings_module):
        name, _ = settings_module

        with pytest.raises(TargetError, match="not a mapping"):
            load_declarations(f"{name}:NOT_A_MAPPING")


class TestCommands:
    """End-to-end tests through run()."""

    def test_check_reports_errors(self, settings_module, clean_env, capsys):
        name, _ = settings_module

        result = run(["check", f"{name}:ENVIRONMENT"])

        assert result == 1
        out = capsys.readouterr().out
        assert "EnvironmentRequiredError: Variable is required: API_KEY" in out
        assert "EnvironmentDirectoryError" in out

    def test_check_passes(self, settings_module, clean_env, capsys):
        name, missing = settings_module
        missing.mkdir()

        with patch.dict(os.environ, {"API_KEY": "secret"}):
            result = run(["check", f"{name}:ENVIRONMENT"])

        assert result == 0
        assert "Environment OK" in capsys.readouterr().out

    def test_create_dirs(self, settings_module, clean_env):
        name, missing = settings_module

        result = run(["create-dirs", f"{name}:ENVIRONMENT"])

        assert result == 0
        assert missing.is_dir()

    def test_create_dirs_failure(self, settings_module, capsys):
        name, _ = settings_module

        with patch.dict(os.environ, {"CACHE_DIR": "/no/such/parent/cache"}):
            result = run(["create-dirs", f"{name}:ENVIRONMENT"])

        assert result == 1
        assert "Could not create directory" in capsys.readouterr().err

    def test_show_json(self, settings_module, clean_env, capsys):
        name, _ = settings_module

        with patch.dict(os.environ, {"WORKERS": "8"}):
            result = run(["show", f"{name}:ENVIRONMENT"])

        assert result == 0
        data = json.loads(capsys.readouterr().out)
        assert data["WORKERS"] == {"value": 8, "required": False, "exists": True}
        assert data["API_KEY"]["required"] is True

    def test_show_yaml(self, settings_module, clean_env, capsys):
        name, _ = settings_module

        result = run(["show", f"{name}:ENVIRONMENT", "--format", "yaml"])

        assert result == 0
        data = yaml.safe_load(capsys.readouterr().out)
        assert data["HOSTS"]["value"] == ["a", "b"]
        assert list(data)[0] == "APP_ENV"

    def test_show_nan_as_null(self, settings_module, capsys):
        name, _ = settings_module

        with patch.dict(os.environ, {"WORKERS": "many"}):
            run(["show", f"{name}:ENVIRONMENT"])

        data = json.loads(capsys.readouterr().out)
        assert data["WORKERS"]["value"] is None

    def test_show_infinity_as_null(self, settings_module, capsys):
        name, _ = settings_module

        with patch.dict(os.environ, {"WORKERS": "-Infinity"}):
            run(["show", f"{name}:ENVIRONMENT"])

        out = capsys.readouterr().out
        assert "Infinity" not in out
        assert json.loads(out)["WORKERS"]["value"] is None

    def test_show_from_working_directory(self, tmp_path, monkeypatch, capsys):
        name = f"envloader_cwd_{uuid.uuid4().hex[:8]}"
        (tmp_path / f"{name}.py").write_text('ENV = {"PORT": 80}\n')
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(
            sys, "path", [p for p in sys.path if p not in ("", ".", str(tmp_path))]
        )

        try:
            result = run(["show", f"{name}:ENV"])
        finally:
            sys.modules.pop(name, None)

        assert result == 0
        assert json.loads(capsys.readouterr().out)["PORT"]["value"] == 80

    def test_export(self, settings_module, clean_env, capsys):
        name, _ = settings_module

        result = run(["export", f"{name}:ENVIRONMENT"])

        assert result == 0
        out = capsys.readouterr().out
        assert "export APP_ENV=development" in out
        assert "export WORKERS=4" in out
        assert "export DEBUG=false" in out
        assert "export HOSTS=a,b" in out

    def test_describe(self, settings_module, clean_env, capsys):
        name, _ = settings_module

        result = run(["describe", f"{name}:ENVIRONMENT", "--width", "30"])

        assert result == 0
        out = capsys.readouterr().out
        assert "[directory]" in out
        assert "API_KEY='' [required]" in out
        assert "    Where cached responses" in out

    def test_bad_target(self, capsys):
        result = run(["check", "envloader_no_such_module_xyz:ENVIRONMENT"])

        assert result == 2
        assert "Could not import" in capsys.readouterr().err

    def test_no_command(self, capsys):
        assert run([]) == 1
