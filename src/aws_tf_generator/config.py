#!/usr/bin/env python3
"""
Configuration Management Module

This module handles configuration loading, validation, and management for the
Terraform generator: output file locations, template directory, default
provider settings and logging.
"""

import os
import yaml
import json
import logging
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field, asdict
from pathlib import Path
from jsonschema import validate, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class OutputConfig:
    """Configuration for generated files"""
    output_directory: str = "./terraform"
    main_file: str = "main.tf"
    provider_file: str = "provider.tf"
    variables_file: str = "variables.tf"
    outputs_file: str = "outputs.tf"
    tfvars_file: str = "terraform.tfvars"
    include_tfvars: bool = False


@dataclass
class ProviderConfig:
    """Defaults written to the global variables preamble"""
    aws_region: str = "us-east-1"
    aws_profile: str = "default"


@dataclass
class TemplateConfig:
    """Configuration for template lookup"""
    template_directory: Optional[str] = None  # None uses the packaged templates


@dataclass
class LoggingConfig:
    """Configuration for logging"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None
    console: bool = True


@dataclass
class GeneratorConfig:
    """Main configuration class for the Terraform generator"""
    output: OutputConfig = field(default_factory=OutputConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    templates: TemplateConfig = field(default_factory=TemplateConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def output_path(self, file_name: str) -> str:
        """Resolve a file name against the output directory"""
        return str(Path(self.output.output_directory) / file_name)


class ConfigManager:
    """Configuration manager for the Terraform generator"""

    # JSON Schema for configuration validation
    CONFIG_SCHEMA = {
        "type": "object",
        "properties": {
            "output": {
                "type": "object",
                "properties": {
                    "output_directory": {"type": "string", "minLength": 1},
                    "main_file": {"type": "string", "minLength": 1},
                    "provider_file": {"type": "string", "minLength": 1},
                    "variables_file": {"type": "string", "minLength": 1},
                    "outputs_file": {"type": "string", "minLength": 1},
                    "tfvars_file": {"type": "string", "minLength": 1},
                    "include_tfvars": {"type": "boolean"}
                },
                "additionalProperties": False
            },
            "provider": {
                "type": "object",
                "properties": {
                    "aws_region": {"type": "string", "minLength": 1},
                    "aws_profile": {"type": "string", "minLength": 1}
                },
                "additionalProperties": False
            },
            "templates": {
                "type": "object",
                "properties": {
                    "template_directory": {"type": ["string", "null"]}
                },
                "additionalProperties": False
            },
            "logging": {
                "type": "object",
                "properties": {
                    "level": {
                        "type": "string",
                        "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
                    },
                    "format": {"type": "string"},
                    "file": {"type": ["string", "null"]},
                    "console": {"type": "boolean"}
                },
                "additionalProperties": False
            }
        }
    }

    DEFAULT_LOCATIONS = [
        './tfgen-config.yaml',
        './tfgen-config.yml',
        './config/tfgen-config.yaml',
        '~/.tfgen/config.yaml'
    ]

    def __init__(self):
        self.config = GeneratorConfig()
        self._config_sources: List[str] = []

    def load_config(self,
                    config_file: Optional[str] = None,
                    cli_args: Optional[Dict[str, Any]] = None,
                    env_vars: bool = True) -> GeneratorConfig:
        """
        Load configuration from multiple sources with precedence:
        1. CLI arguments (highest priority)
        2. Environment variables
        3. Configuration file
        4. Default values (lowest priority)
        """
        logger.info("Loading configuration")

        self.config = GeneratorConfig()
        self._config_sources = ["defaults"]

        if config_file:
            self._load_from_file(config_file)
        else:
            for location in self.DEFAULT_LOCATIONS:
                expanded_path = os.path.expanduser(location)
                if os.path.exists(expanded_path):
                    self._load_from_file(expanded_path)
                    break

        if env_vars:
            self._load_from_env()

        if cli_args:
            self._apply_cli_args(cli_args)

        self._validate_config()

        logger.info(f"Configuration loaded from sources: {', '.join(self._config_sources)}")
        return self.config

    def _load_from_file(self, config_file: str):
        """Load configuration from YAML or JSON file"""
        config_path = Path(config_file).expanduser()
        if not config_path.exists():
            logger.warning(f"Configuration file not found: {config_file}")
            return

        try:
            with open(config_path, 'r') as f:
                if config_path.suffix.lower() in ['.yaml', '.yml']:
                    file_config = yaml.safe_load(f)
                elif config_path.suffix.lower() == '.json':
                    file_config = json.load(f)
                else:
                    logger.warning(f"Unsupported configuration file format: {config_path.suffix}")
                    return
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load configuration from {config_file}: {str(e)}")
            raise

        if file_config:
            self._merge_config(file_config)
            self._config_sources.append(f"file:{config_file}")
            logger.info(f"Loaded configuration from {config_file}")

    def _load_from_env(self):
        """Load configuration from environment variables"""
        env_config: Dict[str, Any] = {}

        if os.getenv('TFGEN_OUTPUT_DIR'):
            env_config.setdefault('output', {})['output_directory'] = os.getenv('TFGEN_OUTPUT_DIR')

        if os.getenv('TFGEN_INCLUDE_TFVARS'):
            env_config.setdefault('output', {})['include_tfvars'] = \
                os.getenv('TFGEN_INCLUDE_TFVARS').lower() == 'true'

        if os.getenv('TFGEN_TEMPLATE_DIR'):
            env_config.setdefault('templates', {})['template_directory'] = os.getenv('TFGEN_TEMPLATE_DIR')

        if os.getenv('TFGEN_AWS_REGION'):
            env_config.setdefault('provider', {})['aws_region'] = os.getenv('TFGEN_AWS_REGION')

        if os.getenv('TFGEN_AWS_PROFILE'):
            env_config.setdefault('provider', {})['aws_profile'] = os.getenv('TFGEN_AWS_PROFILE')

        if os.getenv('TFGEN_LOG_LEVEL'):
            env_config.setdefault('logging', {})['level'] = os.getenv('TFGEN_LOG_LEVEL').upper()

        if os.getenv('TFGEN_LOG_FILE'):
            env_config.setdefault('logging', {})['file'] = os.getenv('TFGEN_LOG_FILE')

        if env_config:
            self._merge_config(env_config)
            self._config_sources.append("environment")
            logger.debug("Loaded configuration from environment variables")

    def _apply_cli_args(self, cli_args: Dict[str, Any]):
        """Apply CLI arguments to configuration"""
        cli_config: Dict[str, Any] = {}

        if cli_args.get('output_dir'):
            cli_config.setdefault('output', {})['output_directory'] = cli_args['output_dir']

        if cli_args.get('include_tfvars') is not None:
            cli_config.setdefault('output', {})['include_tfvars'] = cli_args['include_tfvars']

        if cli_args.get('template_dir'):
            cli_config.setdefault('templates', {})['template_directory'] = cli_args['template_dir']

        if cli_args.get('region'):
            cli_config.setdefault('provider', {})['aws_region'] = cli_args['region']

        if cli_args.get('profile'):
            cli_config.setdefault('provider', {})['aws_profile'] = cli_args['profile']

        if cli_args.get('verbose'):
            cli_config.setdefault('logging', {})['level'] = 'DEBUG'
        elif cli_args.get('quiet'):
            cli_config.setdefault('logging', {})['level'] = 'WARNING'

        if cli_config:
            self._merge_config(cli_config)
            self._config_sources.append("cli_args")
            logger.debug("Applied CLI arguments to configuration")

    def _merge_config(self, new_config: Dict[str, Any]):
        """Merge new configuration into existing configuration"""
        def merge_dict(base: Dict, update: Dict):
            for key, value in update.items():
                if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                    merge_dict(base[key], value)
                else:
                    base[key] = value

        config_dict = self._config_to_dict()
        merge_dict(config_dict, new_config)

        # Validate before rebuilding so unknown keys surface as ValueError
        self._validate_dict(config_dict)
        self.config = self._dict_to_config(config_dict)

    def _config_to_dict(self) -> Dict[str, Any]:
        """Convert configuration dataclass to dictionary"""
        return asdict(self.config)

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to configuration dataclass"""
        return GeneratorConfig(
            output=OutputConfig(**config_dict.get('output', {})),
            provider=ProviderConfig(**config_dict.get('provider', {})),
            templates=TemplateConfig(**config_dict.get('templates', {})),
            logging=LoggingConfig(**config_dict.get('logging', {}))
        )

    def _validate_dict(self, config_dict: Dict[str, Any]):
        try:
            validate(instance=config_dict, schema=self.CONFIG_SCHEMA)
        except ValidationError as e:
            logger.error(f"Configuration validation failed: {e.message}")
            raise ValueError(f"Invalid configuration: {e.message}")

    def _validate_config(self):
        """Validate configuration against schema"""
        self._validate_dict(self._config_to_dict())
        logger.debug("Configuration validation passed")

    def save_config(self, output_file: str, format: str = 'yaml'):
        """Save current configuration to file"""
        config_dict = self._config_to_dict()

        if format.lower() not in ('yaml', 'json'):
            raise ValueError(f"Unsupported format: {format}")

        with open(output_file, 'w') as f:
            if format.lower() == 'yaml':
                yaml.dump(config_dict, f, default_flow_style=False, indent=2)
            else:
                json.dump(config_dict, f, indent=2)

        logger.info(f"Configuration saved to {output_file}")

    def get_config_summary(self) -> Dict[str, Any]:
        """Get a summary of current configuration"""
        return {
            'sources': self._config_sources,
            'output_directory': self.config.output.output_directory,
            'template_directory': self.config.templates.template_directory or 'packaged',
            'aws_region': self.config.provider.aws_region,
            'aws_profile': self.config.provider.aws_profile,
            'include_tfvars': self.config.output.include_tfvars,
            'logging_level': self.config.logging.level
        }


# Default configuration template
DEFAULT_CONFIG_TEMPLATE = """
# Terraform Generator Configuration

output:
  output_directory: "./terraform"
  main_file: main.tf
  provider_file: provider.tf
  variables_file: variables.tf
  outputs_file: outputs.tf
  tfvars_file: terraform.tfvars
  include_tfvars: false

provider:
  aws_region: us-east-1  # default for var.aws_region
  aws_profile: default   # default for var.aws_profile

templates:
  template_directory: null  # null uses the packaged templates

logging:
  level: INFO  # DEBUG, INFO, WARNING, ERROR, CRITICAL
  format: "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
  file: null  # Log file path (null for no file logging)
  console: true
"""
