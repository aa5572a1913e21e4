"""
Tests for configuration loading and the registry built from it.
"""

import argparse
from pathlib import Path
from unittest import TestCase

import pytest
import yaml

from validgen.config import GeneratorConfigSchema, build_registry, load_config
from validgen.exceptions import ConfigurationError


def _write_yaml(path: Path, data) -> Path:
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestGeneratorConfigSchema(TestCase):
    """Test cases for GeneratorConfigSchema defaults and validators"""

    def test_defaults(self):
        config = GeneratorConfigSchema.model_validate({"input_files": ["forms.py"]})

        self.assertEqual(config.template_variant, "direct")
        self.assertEqual(config.input_suffix, "Input")
        self.assertEqual(config.domain_suffix, "Validated")
        self.assertEqual(config.output_suffix, "_validation_gen")
        self.assertEqual(config.password_field_name, "password")
        self.assertIsNone(config.password_domain_name)
        self.assertTrue(config.format_output)
        self.assertEqual(config.line_length, 120)
        self.assertFalse(config.overwrite_unmarked)

    def test_settings_are_attributes_only(self):
        """The schema is read through attributes, not mapping access"""
        config = GeneratorConfigSchema.model_validate({"input_files": ["forms.py"]})

        with self.assertRaises(TypeError):
            config["line_length"]
        self.assertFalse(hasattr(config, "get"))

    def test_naming_conventions(self):
        config = GeneratorConfigSchema.model_validate(
            {"input_files": ["forms.py"], "domain_suffix": "Checked", "password_domain_name": "password_digest"}
        )
        conventions = config.naming_conventions()

        self.assertEqual(conventions.domain_name_for("UserInput"), "UserInputChecked")
        self.assertEqual(conventions.password_domain_name, "password_digest")


@pytest.mark.parametrize(
    "overrides",
    [
        {"input_files": []},
        {"input_files": ["forms.txt"]},
        {"template_variant": "fancy"},
        {"domain_suffix": "not valid"},
        {"password_field_name": "class"},
        {"output_suffix": "-gen"},
        {"line_length": 10},
        {"transform_rules": [{"source_type_name": "x.Y", "target_field_name": "1bad", "target_field_type": "int"}]},
        {"transform_rules": [{"source_type_name": "x.Y", "target_field_name": "y", "target_field_type": "int",
                              "required_capability": "not a module"}]},
    ],
)
def test_invalid_values_rejected(tmp_path, overrides):
    data = {"input_files": ["forms.py"]}
    data.update(overrides)
    config_file = _write_yaml(tmp_path / "validgen.yaml", data)

    with pytest.raises(ConfigurationError) as info:
        load_config(str(config_file))

    assert info.value.error_code == "CONFIG_ERROR"
    assert info.value.context["config_file"] == str(config_file)


def test_yaml_paths_resolve_against_config_dir(tmp_path):
    config_file = _write_yaml(tmp_path / "validgen.yaml", {"input_files": ["forms/user.py"], "template_variant": "newtype"})

    config = load_config(str(config_file))

    assert config.input_files == [str((tmp_path / "forms" / "user.py").resolve())]
    assert config.template_variant == "newtype"


def test_cli_arguments_override_yaml(tmp_path):
    config_file = _write_yaml(tmp_path / "validgen.yaml", {"input_files": ["a.py"], "template_variant": "newtype"})
    cli_args = argparse.Namespace(
        input_files=[],
        config=str(config_file),
        template_variant="direct",
        output_suffix=None,
        format_output=False,
        check=False,
        verbose=True,
    )

    config = load_config(str(config_file), cli_args)

    assert config.template_variant == "direct"
    assert config.format_output is False
    assert config.input_files == [str((tmp_path / "a.py").resolve())]


def test_cli_input_files_replace_yaml(tmp_path):
    config_file = _write_yaml(tmp_path / "validgen.yaml", {"input_files": ["a.py"]})
    cli_args = argparse.Namespace(input_files=[str(tmp_path / "b.py")])

    config = load_config(str(config_file), cli_args)

    assert config.input_files == [str((tmp_path / "b.py").resolve())]


def test_missing_config_file_falls_back_to_cli(tmp_path):
    cli_args = argparse.Namespace(input_files=[str(tmp_path / "forms.py")])

    config = load_config(str(tmp_path / "absent.yaml"), cli_args)

    assert len(config.input_files) == 1


def test_malformed_yaml(tmp_path):
    config_file = tmp_path / "validgen.yaml"
    config_file.write_text("input_files: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config(str(config_file))


def test_yaml_must_be_a_mapping(tmp_path):
    config_file = tmp_path / "validgen.yaml"
    config_file.write_text("- forms.py\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config(str(config_file))


def test_build_registry_merges_configured_rules():
    config = GeneratorConfigSchema.model_validate({
        "input_files": ["forms.py"],
        "transform_rules": [
            {
                "source_type_name": "money.Cents",
                "target_field_name": "amount",
                "target_field_type": "decimal.Decimal",
                "required_capability": "shop.money",
            },
        ],
    })

    registry = build_registry(config)

    assert len(registry) == 3
    assert registry.lookup("money.Cents").required_capability == "shop.money"
    assert "fieldtypes.DateOfBirthString" in registry


def test_build_registry_rejects_duplicate_configured_rules():
    rule = {"source_type_name": "money.Cents", "target_field_name": "amount", "target_field_type": "int"}
    config = GeneratorConfigSchema.model_validate({"input_files": ["forms.py"], "transform_rules": [rule, rule]})

    with pytest.raises(ConfigurationError):
        build_registry(config)
