"""Tests for built-in variables and pre-supplied values."""

from __future__ import annotations

from pathlib import Path

import pytest

from stamper.errors import ConfigurationError
from stamper.models.args import CrateType, GenerateArgs
from stamper.variables import (
    TEMPLATE_VALUES_ENV,
    ProjectName,
    create_builtin_variables,
    get_authors,
    load_env_and_args_template_values,
    parse_defines,
    within_cargo_project,
)


@pytest.fixture
def author_env(monkeypatch):
    for name in ("STAMPER_NAME", "GIT_AUTHOR_NAME", "GIT_COMMITTER_NAME",
                 "STAMPER_EMAIL", "GIT_AUTHOR_EMAIL", "GIT_COMMITTER_EMAIL", "EMAIL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("STAMPER_NAME", "Ada Lovelace")
    monkeypatch.setenv("STAMPER_EMAIL", "ada@example.com")


class TestProjectName:
    """Tests for ProjectName."""

    def test_derived_forms(self) -> None:
        """The name is offered raw, kebab-cased and snake-cased."""
        name = ProjectName("My Cool_Project")
        assert name.raw() == "My Cool_Project"
        assert name.kebab_case() == "my-cool-project"
        assert name.snake_case() == "my_cool_project"
        assert not name.is_crate_name()

    def test_canonical_name(self) -> None:
        """A kebab-case name is already canonical."""
        assert ProjectName("foobar").is_crate_name()
        assert ProjectName("foo-bar").is_crate_name()


class TestBuiltinVariables:
    """Tests for create_builtin_variables()."""

    def test_all_builtins_present(self, tmp_path: Path, author_env) -> None:
        """Every built-in is set with the expected value type."""
        variables = create_builtin_variables(
            GenerateArgs(), tmp_path / "foo-bar", ProjectName("FooBar"), CrateType.bin
        )
        assert variables["project-name"] == "foo-bar"
        assert variables["crate_name"] == "foo_bar"
        assert variables["crate_type"] == "bin"
        assert variables["authors"] == "Ada Lovelace <ada@example.com>"
        assert variables["is_init"] is False
        assert isinstance(variables["username"], str)
        assert "-" in variables["os-arch"]
        assert isinstance(variables["within_cargo_project"], bool)

    def test_force_keeps_raw_name(self, tmp_path: Path, author_env) -> None:
        """With --force the project name is used as typed."""
        variables = create_builtin_variables(
            GenerateArgs(force=True, init=True), tmp_path, ProjectName("FooBar"), CrateType.lib
        )
        assert variables["project-name"] == "FooBar"
        assert variables["crate_type"] == "lib"
        assert variables["is_init"] is True

    def test_authors_without_email(self, monkeypatch, author_env) -> None:
        """Only the name is reported when no email is known."""
        monkeypatch.delenv("STAMPER_EMAIL")
        monkeypatch.setattr("stamper.variables._git_config", lambda key: None)
        assert get_authors() == "Ada Lovelace"

    def test_within_cargo_project(self, tmp_path: Path) -> None:
        """A Cargo.toml in a parent directory is detected."""
        (tmp_path / "Cargo.toml").write_text("[workspace]\n")
        assert within_cargo_project(tmp_path / "member")


class TestParseDefines:
    """Tests for parse_defines()."""

    def test_pairs(self) -> None:
        """Values may contain '=' and be empty."""
        assert parse_defines(["a=1", "b=x=y", "c="]) == {"a": "1", "b": "x=y", "c": ""}

    @pytest.mark.parametrize("define", ["novalue", "=x"])
    def test_invalid(self, define) -> None:
        """Entries without a key or '=' are rejected."""
        with pytest.raises(ConfigurationError, match="key=value"):
            parse_defines([define])


class TestTemplateValues:
    """Tests for load_env_and_args_template_values()."""

    def test_precedence(self, tmp_path: Path, monkeypatch) -> None:
        """--define beats the values file, which beats the env file."""
        env_file = tmp_path / "env.toml"
        env_file.write_text('[values]\nlicense = "MIT"\nowner = "env"\nflag = true\n')
        values_file = tmp_path / "values.yaml"
        values_file.write_text("values:\n  owner: file\n  region: eu\n")
        monkeypatch.setenv(TEMPLATE_VALUES_ENV, str(env_file))
        args = GenerateArgs(template_values_file=values_file, define=["region=us"])
        assert load_env_and_args_template_values(args) == {
            "license": "MIT",
            "owner": "file",
            "flag": True,
            "region": "us",
        }

    def test_missing_values_file(self, tmp_path: Path, monkeypatch) -> None:
        """A values file that does not exist is a configuration error."""
        monkeypatch.delenv(TEMPLATE_VALUES_ENV, raising=False)
        args = GenerateArgs(template_values_file=tmp_path / "missing.toml")
        with pytest.raises(ConfigurationError, match="not found"):
            load_env_and_args_template_values(args)

    def test_nothing_supplied(self, monkeypatch) -> None:
        """Without sources the result is empty."""
        monkeypatch.delenv(TEMPLATE_VALUES_ENV, raising=False)
        assert load_env_and_args_template_values(GenerateArgs()) == {}
