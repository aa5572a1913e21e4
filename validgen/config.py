import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from .constants import DefaultConfig
from .domain.models import NamingConventions, TransformRule
from .domain.naming import validate_python_identifier
from .domain.registry import TransformRegistry, default_registry
from .exceptions import ConfigurationError


logger = logging.getLogger(__name__)


# --- Pydantic Models for Configuration Schema ---


class TransformRuleSettings(BaseModel):
    """Schema for one extra transform registry entry."""

    model_config = ConfigDict(extra="forbid")

    source_type_name: str = Field(
        ..., min_length=1, description="Type name as written in declarations (e.g. 'fieldtypes.Slug')."
    )
    target_field_name: str = Field(..., min_length=1, description="Domain field name the rule produces.")
    target_field_type: str = Field(..., min_length=1, description="Domain field type the rule produces.")
    required_capability: Optional[str] = Field(
        default=None, description="Module the generated code must import for the converter."
    )

    @field_validator("target_field_name")
    @classmethod
    def check_field_identifier(cls, v: str) -> str:
        if not validate_python_identifier(v):
            raise ValueError(f"'{v}' is not a valid Python identifier or is a reserved keyword.")
        return v

    @field_validator("required_capability")
    @classmethod
    def check_module_path(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not all(validate_python_identifier(part) for part in v.split(".")):
            raise ValueError(f"'{v}' is not a dotted module path.")
        return v

    def to_rule(self) -> TransformRule:
        return TransformRule(
            source_type_name=self.source_type_name,
            target_field_name=self.target_field_name,
            target_field_type=self.target_field_type,
            required_capability=self.required_capability,
        )


class GeneratorConfigSchema(BaseModel):
    """Pydantic schema defining the expected structure and types for the configuration."""

    model_config = ConfigDict(extra="ignore")

    input_files: List[str] = Field(
        ..., min_length=1, description="Declaration files to generate validated records for."
    )
    template_variant: Literal["direct", "newtype"] = Field(
        default=DefaultConfig.TEMPLATE_VARIANT,
        description="'direct' copies fields; 'newtype' wraps each field in a NewType.",
    )
    input_suffix: str = Field(default=DefaultConfig.INPUT_SUFFIX, description="Suffix marking input classes.")
    domain_suffix: str = Field(default=DefaultConfig.DOMAIN_SUFFIX, description="Suffix of generated records.")
    output_suffix: str = Field(default=DefaultConfig.OUTPUT_SUFFIX, description="Suffix of generated file stems.")
    password_field_name: str = Field(
        default=DefaultConfig.PASSWORD_FIELD_NAME, description="Field name treated as a hashing candidate."
    )
    password_domain_name: Optional[str] = Field(
        default=None, description="Domain name for hashing candidates; keeps the input name when unset."
    )
    source_module: Optional[str] = Field(
        default=None, description="Import name of the declaration module; derived from the path when unset."
    )
    format_output: bool = Field(default=DefaultConfig.FORMAT_OUTPUT, description="Format output with Black.")
    line_length: int = Field(default=DefaultConfig.LINE_LENGTH, gt=40, description="Black line length.")
    overwrite_unmarked: bool = Field(
        default=DefaultConfig.OVERWRITE_UNMARKED,
        description="Allow replacing an existing output file that lacks the generated marker.",
    )
    transform_rules: List[TransformRuleSettings] = Field(
        default_factory=list, description="Extra transform registry entries."
    )

    # --- Custom Field Validators ---

    @field_validator("input_suffix", "domain_suffix", "password_field_name", "password_domain_name")
    @classmethod
    def check_valid_identifier(cls, v: Optional[str]) -> Optional[str]:
        """Names that end up in generated code must be valid Python identifiers."""
        if v is not None and not validate_python_identifier(v):
            raise ValueError(f"'{v}' is not a valid Python identifier or is a reserved keyword.")
        return v

    @field_validator("output_suffix")
    @classmethod
    def check_output_suffix(cls, v: str) -> str:
        if not v or not v.replace("_", "a").isalnum():
            raise ValueError(f"'{v}' must be a non-empty mix of letters, digits and underscores.")
        return v

    @field_validator("input_files")
    @classmethod
    def check_input_files(cls, v: List[str]) -> List[str]:
        for index, item in enumerate(v):
            if not item.strip():
                raise ValueError(f"Item at index {index} cannot be empty or just whitespace.")
            if not item.endswith(".py"):
                raise ValueError(f"'{item}' is not a Python file.")
        return v

    def naming_conventions(self) -> NamingConventions:
        return NamingConventions(
            input_suffix=self.input_suffix,
            domain_suffix=self.domain_suffix,
            password_field_name=self.password_field_name,
            password_domain_name=self.password_domain_name,
        )


# --- Validation Function (Internal) ---
def _validate_and_parse_config(config_dict: Dict[str, Any], config_path: Optional[str] = None) -> GeneratorConfigSchema:
    """Validates a raw configuration dictionary against the Pydantic schema."""
    try:
        validated_config = GeneratorConfigSchema.model_validate(config_dict)
        logger.debug("Configuration dictionary parsed and validated successfully.")
        return validated_config
    except ValidationError as e:
        problems = []
        for error in e.errors():
            # Format location path (e.g., transform_rules -> 0 -> target_field_name)
            loc_parts = [str(loc_item) for loc_item in error.get("loc", ())]
            loc_str = " -> ".join(loc_parts) if loc_parts else "Top Level"
            problems.append(f"{loc_str}: {error.get('msg', 'Unknown error')}")
            logger.error(f"Configuration error at '{loc_str}': {error.get('msg', 'Unknown error')}")
        raise ConfigurationError(
            "Configuration validation failed: " + "; ".join(problems),
            config_file=config_path,
            context={"errors": len(problems)},
        ) from e


def _read_yaml(config_path: str) -> Dict[str, Any]:
    config_file = Path(config_path)
    if not config_file.is_file():
        logger.warning(f"Config file not found at {config_path}. Using defaults and CLI arguments.")
        return {}
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing YAML file {config_path}: {e}", config_file=config_path) from e

    if yaml_config is None:
        return {}
    if not isinstance(yaml_config, dict):
        raise ConfigurationError(
            f"Content in config file {config_path} is not a mapping.", config_file=config_path
        )

    # Input paths in the file are relative to the file itself
    if isinstance(yaml_config.get("input_files"), list):
        yaml_config["input_files"] = [
            str((config_file.parent / item).resolve()) if isinstance(item, str) else item
            for item in yaml_config["input_files"]
        ]
    logger.debug(f"Loaded configuration from {config_path}")
    return yaml_config


# --- Main Configuration Loading Function ---


def load_config(
    config_path: Optional[str], cli_args: Optional[argparse.Namespace] = None
) -> GeneratorConfigSchema:
    """
    Loads configuration from YAML file, merges with CLI arguments,
    validates the result, and returns a validated Pydantic model instance.

    Raises:
        ConfigurationError: If the YAML cannot be parsed or validation fails
    """
    raw_config: Dict[str, Any] = {}

    # 1. Load from YAML file if path is provided
    if config_path:
        raw_config.update(_read_yaml(config_path))

    # 2. Override with CLI arguments (only those explicitly provided)
    overridden_keys = set()
    if cli_args is not None:
        for key, value in vars(cli_args).items():
            if value is None or value == [] or key not in GeneratorConfigSchema.model_fields:
                continue
            if key == "input_files":
                value = [str(Path(item).resolve()) for item in value]
            raw_config[key] = value
            overridden_keys.add(key)
    if overridden_keys:
        logger.debug(f"Overridden config keys from CLI arguments: {sorted(overridden_keys)}")

    # 3. Validate the combined configuration dictionary using Pydantic
    logger.info("Validating final configuration...")
    validated_config = _validate_and_parse_config(raw_config, config_path)

    logger.info("Configuration loaded and validated successfully.")
    return validated_config


def build_registry(config: GeneratorConfigSchema) -> TransformRegistry:
    """The default transform registry plus any rules declared in configuration."""
    registry = default_registry()
    if config.transform_rules:
        registry = registry.merged_with(rule.to_rule() for rule in config.transform_rules)
    logger.debug(f"Transform registry: {registry}")
    return registry
