"""Tests for template config, app config and values file loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from stamper.errors import ConfigurationError
from stamper.loader.toml_parser import build_line_map, split_dotted_key
from stamper.loader.validator import (
    load_app_config,
    load_template_config,
    load_values_file,
    validate_template_config_string,
)
from stamper.models.slots import BoolSlot, StringSlot
from stamper.models.template_config import TemplateConfig

FULL_CONFIG = """\
[template]
cargo_generate_version = ">=0.10"
include = ["src/**"]
ignore = ["target"]

[hooks]
pre = ["pre.py"]
post = ["post.sh", "pre.py"]

[placeholders.license]
type = "string"
prompt = "License?"
choices = ["MIT", "Apache-2.0"]
default = "MIT"

[placeholders.is_wasm]
type = "bool"
prompt = "Wasm?"
default = false

[conditional."is_wasm == true"]
exclude = ["src/main.rs"]

[conditional."is_wasm == true".placeholders.wasm_target]
type = "string"
prompt = "Target?"
default = "web"
"""


class TestValidateTemplateConfigString:
    """Tests for validate_template_config_string()."""

    def test_full_config_parses(self) -> None:
        """All four sections parse into the expected models."""
        config, errors = validate_template_config_string(FULL_CONFIG)
        assert errors == []
        assert config is not None
        assert config.template.stamper_version == ">=0.10"
        assert config.template.include == ["src/**"]
        assert config.hooks.pre == ["pre.py"]
        assert isinstance(config.placeholders["license"], StringSlot)
        assert isinstance(config.placeholders["is_wasm"], BoolSlot)
        fragment = config.conditional["is_wasm == true"]
        assert fragment.exclude == ["src/main.rs"]
        assert fragment.placeholders["wasm_target"].default == "web"

    def test_placeholder_order_is_preserved(self) -> None:
        """Placeholders keep their declaration order."""
        config, _ = validate_template_config_string(FULL_CONFIG)
        assert list(config.placeholders) == ["license", "is_wasm"]

    def test_var_names_assigned_from_keys(self) -> None:
        """Each slot knows its own variable name, nested ones included."""
        config, _ = validate_template_config_string(FULL_CONFIG)
        assert config.placeholders["license"].var_name == "license"
        wasm_target = config.conditional["is_wasm == true"].placeholders["wasm_target"]
        assert wasm_target.var_name == "wasm_target"

    def test_hook_files_deduplicated(self) -> None:
        """get_hook_files lists pre then post hooks without duplicates."""
        config, _ = validate_template_config_string(FULL_CONFIG)
        assert config.get_hook_files() == ["pre.py", "post.sh"]

    def test_stamper_version_key_accepted(self) -> None:
        """The native key name works as well as the legacy alias."""
        config, errors = validate_template_config_string('[template]\nstamper_version = "^0.15"\n')
        assert errors == []
        assert config.template.stamper_version == "^0.15"

    def test_empty_document_is_empty_config(self) -> None:
        """An empty or comment-only file is a valid, empty config."""
        config, errors = validate_template_config_string("# nothing here\n")
        assert errors == []
        assert config == TemplateConfig()

    def test_unknown_field_with_suggestion(self) -> None:
        """A typo is reported with its line and a did-you-mean hint."""
        config, errors = validate_template_config_string('[template]\ninclde = ["*.rs"]\n')
        assert config is None
        assert len(errors) == 1
        error = errors[0]
        assert error.field == "template.inclde"
        assert error.type == "extra_forbidden"
        assert error.line == 2
        assert error.suggestion == "Did you mean 'include'?"

    def test_syntax_error_reported_with_position(self) -> None:
        """A TOML syntax error becomes a single positioned error."""
        config, errors = validate_template_config_string("[template\ninclude = 1\n")
        assert config is None
        assert errors[0].type == "toml_syntax_error"
        assert errors[0].line == 1

    def test_invalid_slot_reports_field_path(self) -> None:
        """Slot declaration errors point at the placeholder."""
        source = '[placeholders.name]\ntype = "string"\nprompt = "x"\nregex = "[a-"\n'
        _, errors = validate_template_config_string(source)
        assert errors
        assert errors[0].field.startswith("placeholders.name")
        assert errors[0].line == 1


class TestLoadTemplateConfig:
    """Tests for load_template_config()."""

    def test_none_path_is_empty_config(self) -> None:
        """A template without a config file gets the empty config."""
        assert load_template_config(None) == TemplateConfig()

    def test_invalid_file_raises_with_details(self, tmp_path: Path) -> None:
        """Schema errors raise ConfigurationError carrying the details."""
        path = tmp_path / "stamper.toml"
        path.write_text("[hooks]\npre = 1\n", encoding="utf-8")
        with pytest.raises(ConfigurationError) as exc_info:
            load_template_config(path)
        assert exc_info.value.errors
        assert exc_info.value.filename == str(path)
        assert "pre = 1" in exc_info.value.source


class TestLoadValuesFile:
    """Tests for load_values_file()."""

    def test_toml_values_table(self, tmp_path: Path) -> None:
        """TOML files carry values in a [values] table."""
        path = tmp_path / "values.toml"
        path.write_text('[values]\nlicense = "MIT"\nis_wasm = true\n', encoding="utf-8")
        assert load_values_file(path) == {"license": "MIT", "is_wasm": True}

    def test_yaml_values_mapping(self, tmp_path: Path) -> None:
        """YAML files carry values in a values: mapping."""
        path = tmp_path / "values.yaml"
        path.write_text("values:\n  license: MIT\n  is_wasm: false\n", encoding="utf-8")
        assert load_values_file(path) == {"license": "MIT", "is_wasm": False}

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """A values file that does not exist is a configuration error."""
        with pytest.raises(ConfigurationError, match="not found"):
            load_values_file(tmp_path / "nope.toml")

    def test_values_must_be_a_table(self, tmp_path: Path) -> None:
        """A scalar values entry is rejected."""
        path = tmp_path / "values.toml"
        path.write_text('values = "oops"\n', encoding="utf-8")
        with pytest.raises(ConfigurationError, match="must be a table"):
            load_values_file(path)


class TestLoadAppConfig:
    """Tests for load_app_config()."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        """No config file means an empty AppConfig."""
        config = load_app_config(tmp_path / "config.yaml")
        assert config.favorites == {}
        assert config.defaults.values == {}

    def test_favorites_and_defaults(self, tmp_path: Path) -> None:
        """Favorites and default values are read from YAML."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "defaults:\n"
            "  values:\n"
            "    license: MIT\n"
            "favorites:\n"
            "  web:\n"
            "    description: Web starter\n"
            "    git: gh:acme/web-template\n"
            "    branch: develop\n"
            "    vcs: none\n",
            encoding="utf-8",
        )
        config = load_app_config(path)
        assert config.defaults.values == {"license": "MIT"}
        favorite = config.get_favorite("web")
        assert favorite.git == "gh:acme/web-template"
        assert favorite.vcs == "none"
        assert config.get_favorite("missing") is None

    def test_unknown_key_raises(self, tmp_path: Path) -> None:
        """Unknown keys in the app config are errors."""
        path = tmp_path / "config.yaml"
        path.write_text("favourites: {}\n", encoding="utf-8")
        with pytest.raises(ConfigurationError) as exc_info:
            load_app_config(path)
        assert exc_info.value.errors[0].suggestion == "Did you mean 'favorites'?"


class TestLineMap:
    """Tests for the TOML key position scanner."""

    def test_split_dotted_key_honours_quotes(self) -> None:
        """Dots inside quoted segments do not split the key."""
        assert split_dotted_key('conditional."a.b == true".exclude') == [
            "conditional",
            "a.b == true",
            "exclude",
        ]

    def test_headers_and_keys_mapped(self) -> None:
        """Table headers and assignments both get positions."""
        line_map = build_line_map(FULL_CONFIG)
        assert line_map["template"] == (1, 1)
        assert line_map["template.include"] == (3, 1)
        assert line_map["conditional.is_wasm == true"][0] == 21
        assert "conditional.is_wasm == true.placeholders.wasm_target.default" in line_map
