#!/usr/bin/env python3
"""
Command Line Interface for the Terraform Generator

This module provides the CLI that loads resource descriptors from a file and
writes the generated Terraform configuration.
"""

import click
import logging
import sys
import os
from pathlib import Path
from typing import Dict, List, Optional, Any
import json
import yaml
from tabulate import tabulate

from . import __version__
from .config import ConfigManager, GeneratorConfig, DEFAULT_CONFIG_TEMPLATE
from .generator import TerraformGenerator
from .projection import VARIABLE_ATTRIBUTES
from .resources import TERRAFORM_TYPES, load_resource_set
from .templates import DEFAULT_CATEGORY_TEMPLATES

logger = logging.getLogger(__name__)


def _configure_logging(config: GeneratorConfig):
    """Configure root logging from the logging section of the configuration"""
    handlers: List[logging.Handler] = []
    if config.logging.console:
        handlers.append(logging.StreamHandler())
    if config.logging.file:
        handlers.append(logging.FileHandler(config.logging.file))

    logging.basicConfig(
        level=getattr(logging, config.logging.level),
        format=config.logging.format,
        handlers=handlers or [logging.NullHandler()],
        force=True
    )


def _read_names(path: Optional[str], section: str) -> List[str]:
    """
    Read previously used identifiers

    Accepts a JSON/YAML list, a JSON/YAML mapping with a `section` key (as
    written by --save-names), or a plain text file with one name per line.
    """
    if not path:
        return []

    names_path = Path(path)
    with open(names_path, 'r') as f:
        if names_path.suffix.lower() in ['.yaml', '.yml', '.json']:
            data = yaml.safe_load(f) if names_path.suffix.lower() != '.json' else json.load(f)
        else:
            return [line.strip() for line in f if line.strip() and not line.startswith('#')]

    if isinstance(data, dict):
        data = data.get(section, [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of names in {path}")
    return [str(name) for name in data]


@click.group()
@click.version_option(version=__version__)
@click.option('--config', '-c', type=click.Path(exists=True),
              help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True,
              help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True,
              help='Enable quiet mode (warnings and errors only)')
@click.pass_context
def cli(ctx, config, verbose, quiet):
    """
    AWS Terraform Generator

    Generates a consistent set of Terraform files from AWS resource
    descriptors, with unique and stable resource, variable and output names.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet


@cli.command()
@click.option('--input', '-i', 'input_file', required=True, type=click.Path(exists=True),
              help='Resource descriptor file (YAML or JSON)')
@click.option('--output-dir', '-o',
              help='Output directory for generated Terraform files')
@click.option('--template-dir', type=click.Path(exists=True, file_okay=False),
              help='Directory with custom templates')
@click.option('--region', help='Default for var.aws_region')
@click.option('--profile', help='Default for var.aws_profile')
@click.option('--imported-variables', type=click.Path(exists=True),
              help='File with variable names that must not be reused')
@click.option('--imported-outputs', type=click.Path(exists=True),
              help='File with output names that must not be reused')
@click.option('--tfvars/--no-tfvars', default=None,
              help='Also write terraform.tfvars from variable defaults')
@click.option('--save-names', type=click.Path(dir_okay=False),
              help='Write allocated variable and output names to this file')
@click.pass_context
def generate(ctx, input_file, output_dir, template_dir, region, profile,
             imported_variables, imported_outputs, tfvars, save_names):
    """
    Generate Terraform files from resource descriptors

    Writes main.tf, provider.tf, variables.tf with one variables file per
    resource category, outputs.tf and optionally terraform.tfvars.
    """
    try:
        config_manager = ConfigManager()
        cli_args = {
            'output_dir': output_dir,
            'template_dir': template_dir,
            'region': region,
            'profile': profile,
            'include_tfvars': tfvars,
            'verbose': ctx.obj.get('verbose', False),
            'quiet': ctx.obj.get('quiet', False)
        }

        config = config_manager.load_config(
            config_file=ctx.obj.get('config_file'),
            cli_args=cli_args
        )
        _configure_logging(config)

        resources = load_resource_set(input_file)
        Path(config.output.output_directory).mkdir(parents=True, exist_ok=True)

        generator = TerraformGenerator(config)
        result = generator.generate_all(
            resources,
            imported_variable_names=_read_names(imported_variables, 'variables'),
            imported_output_names=_read_names(imported_outputs, 'outputs')
        )

        if save_names:
            with open(save_names, 'w') as f:
                yaml.dump({'variables': result.variable_names, 'outputs': result.output_names},
                          f, default_flow_style=False)

        click.echo(f"\nSuccess Generation completed successfully!")
        click.echo(f"   Directory Output directory: {config.output.output_directory}")
        click.echo(f"    Resources: {resources.total()}")
        click.echo(f"   Files: Files written: {len(result.files)}")
        click.echo(f"    Variables: {len(result.variable_names)}")
        click.echo(f"    Outputs: {len(result.output_names)}")

    except Exception as e:
        click.echo(f"Error Generation failed: {str(e)}", err=True)
        sys.exit(1)


@cli.command()
def categories():
    """
    List resource categories in generation order

    Shows the Terraform type, the main.tf template and the variables file of
    each category.
    """
    rows = []
    for entry in DEFAULT_CATEGORY_TEMPLATES:
        variables = ', '.join(suffix for _, suffix in VARIABLE_ATTRIBUTES.get(entry.key, ()))
        rows.append([
            entry.key,
            TERRAFORM_TYPES[entry.key],
            entry.main_template,
            entry.variables_file or '-',
            variables or '-'
        ])

    click.echo(tabulate(rows,
                        headers=['Category', 'Terraform Type', 'Template', 'Variables File', 'Variables'],
                        tablefmt='grid'))


@cli.command()
@click.option('--output-file', '-o', default='tfgen-config.yaml',
              help='Output configuration file')
@click.option('--format', 'config_format', type=click.Choice(['yaml', 'json']),
              default='yaml', help='Configuration file format')
def init_config(output_file, config_format):
    """
    Generate a default configuration file

    This command creates a default configuration file that can be customized
    for your environment.
    """
    try:
        if os.path.exists(output_file):
            if not click.confirm(f"Configuration file {output_file} already exists. Overwrite?"):
                click.echo("Configuration file creation cancelled.")
                return

        with open(output_file, 'w') as f:
            if config_format == 'yaml':
                f.write(DEFAULT_CONFIG_TEMPLATE)
            else:
                config_dict = yaml.safe_load(DEFAULT_CONFIG_TEMPLATE)
                json.dump(config_dict, f, indent=2)

        click.echo(f"Success Default configuration file created: {output_file}")

    except Exception as e:
        click.echo(f"Error Failed to create configuration file: {str(e)}", err=True)
        sys.exit(1)


@cli.command()
@click.pass_context
def validate_config(ctx):
    """
    Validate configuration file

    This command validates the configuration file for syntax and semantic errors.
    """
    try:
        config_manager = ConfigManager()
        config_manager.load_config(config_file=ctx.obj.get('config_file'))

        click.echo("Success Configuration validation passed!")

        summary = config_manager.get_config_summary()
        click.echo("\n Configuration Summary:")
        for key, value in summary.items():
            click.echo(f"   {key}: {value}")

    except Exception as e:
        click.echo(f"Error Configuration validation failed: {str(e)}", err=True)
        sys.exit(1)


def main():
    """Main entry point for the CLI"""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nWarning  Operation cancelled by user.")
        sys.exit(1)


if __name__ == '__main__':
    main()
