#!/usr/bin/env python3
"""
Terraform Configuration Generator

This module turns a ResourceSet into the Terraform files of one configuration:
main.tf, provider.tf, the global and per-category variables files, outputs.tf
and optionally terraform.tfvars. Every file is rendered from its template and
written once, overwriting whatever was at the target path.
"""

import json
import re
import logging
from typing import Dict, List, Optional, Any, Iterable, Tuple
from dataclasses import dataclass, field
from pathlib import Path

from .config import GeneratorConfig
from .naming import NameRegistry
from .projection import project_all_variables, project_all_outputs
from .resources import ResourceSet
from .templates import (
    DEFAULT_CATEGORY_TEMPLATES,
    OUTPUTS_TEMPLATE,
    PROVIDER_TEMPLATE,
    TFVARS_TEMPLATE,
    CategoryTemplates,
    JinjaRenderer,
    TemplateLoader,
    TemplateRenderer,
    validate_category_templates,
)

logger = logging.getLogger(__name__)

# variable "name" { ... default = "value" ... }, value may hold JSON escapes such as \"
VARIABLE_DEFAULT_PATTERN = re.compile(r'variable\s+"([^"]+)"[^{]*{[^}]*default\s*=\s*"((?:[^"\\]|\\.)*)"')


@dataclass
class GenerationResult:
    """Result of a full generation run"""
    files: List[str] = field(default_factory=list)
    variable_names: List[str] = field(default_factory=list)
    output_names: List[str] = field(default_factory=list)
    variables: List[Dict[str, Any]] = field(default_factory=list)


def filter_duplicate_variables(variables: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Drop variables whose name was already seen, keeping the first occurrence"""
    seen = set()
    unique = []
    for variable in variables:
        if variable['name'] in seen:
            continue
        seen.add(variable['name'])
        unique.append(variable)
    return unique


def extract_variable_defaults(text: str) -> List[Dict[str, Any]]:
    """Collect name/default pairs of string-valued variables from rendered variables text"""
    variables = []
    for match in VARIABLE_DEFAULT_PATTERN.finditer(text):
        raw = match.group(2)
        try:
            default = json.loads(f'"{raw}"')
        except ValueError:
            default = raw
        variables.append({'name': match.group(1), 'default': default})
    return variables


class TerraformGenerator:
    """
    Terraform configuration generator

    Each generate_* call is a single pass: it uniquifies resource names,
    allocates identifiers from a fresh registry seeded with the caller's
    imported names, renders and writes. Missing templates and write failures
    propagate to the caller; files written before a failure are left in place.
    """

    GLOBAL_VARIABLES_TEMPLATE = """variable "aws_region" {
  description = "AWS region to deploy resources"
  type        = string
  default     = {{ aws_region | tojson }}
}

variable "aws_profile" {
  description = "AWS CLI profile to use"
  type        = string
  default     = {{ aws_profile | tojson }}
}
"""

    def __init__(self,
                 config: Optional[GeneratorConfig] = None,
                 category_templates: Tuple[CategoryTemplates, ...] = DEFAULT_CATEGORY_TEMPLATES,
                 renderer: Optional[TemplateRenderer] = None,
                 loader: Optional[TemplateLoader] = None):
        """
        Initialize the generator

        Args:
            config: Generator configuration (defaults when omitted)
            category_templates: Category -> template/output table, in category order
            renderer: Template renderer (Jinja2 when omitted)
            loader: Template source loader (packaged templates when omitted)
        """
        validate_category_templates(category_templates)

        self.config = config or GeneratorConfig()
        self.category_templates = tuple(category_templates)
        self.renderer = renderer or JinjaRenderer()
        self.loader = loader or TemplateLoader(self.config.templates.template_directory)

        logger.debug(f"Initialized TerraformGenerator with templates from {self.loader.template_dir}")

    def generate_main(self,
                      resources: ResourceSet,
                      imported_variable_names: Optional[Iterable[str]] = None,
                      output_path: Optional[str] = None) -> str:
        """
        Generate main.tf with one block per resource, grouped by category

        Variable references use the same identifiers generate_variables
        allocates for the same input and imported names.

        Returns:
            Path of the written file
        """
        output_path = output_path or self.config.output_path(self.config.output.main_file)

        projected, _ = project_all_variables(resources, imported_variable_names)
        context = {category: items for category, items in projected.items() if items}

        main_tf = ""
        for entry in self.category_templates:
            if not context.get(entry.key):
                continue
            logger.debug(f"Rendering {len(context[entry.key])} {entry.key} blocks")
            main_tf += self._render_template(entry.main_template, context) + "\n"

        self._write_file(output_path, main_tf)
        return output_path

    def generate_provider(self, output_path: Optional[str] = None) -> str:
        """Generate provider.tf"""
        output_path = output_path or self.config.output_path(self.config.output.provider_file)
        rendered = self._render_template(PROVIDER_TEMPLATE, {})
        self._write_file(output_path, rendered)
        return output_path

    def generate_variables(self,
                           resources: ResourceSet,
                           imported_variable_names: Optional[Iterable[str]] = None,
                           output_dir: Optional[str] = None) -> Dict[str, str]:
        """
        Generate variables.tf plus one variables file per projected category

        Returns:
            Mapping of written path to rendered content, in write order
        """
        written, _ = self._generate_variables(resources, imported_variable_names, output_dir)
        return written

    def generate_outputs(self,
                         resources: ResourceSet,
                         imported_output_names: Optional[Iterable[str]] = None,
                         output_path: Optional[str] = None) -> str:
        """Generate outputs.tf for every category, empty categories included"""
        output_path, _ = self._generate_outputs(resources, imported_output_names, output_path)
        return output_path

    def generate_tfvars(self, variables: List[Dict[str, Any]],
                        output_path: Optional[str] = None) -> str:
        """
        Generate terraform.tfvars

        Args:
            variables: Already de-duplicated {name, default} mappings
            output_path: Target path (defaults to the configured tfvars file)
        """
        output_path = output_path or self.config.output_path(self.config.output.tfvars_file)
        rendered = self._render_template(TFVARS_TEMPLATE, {'variables': variables})
        self._write_file(output_path, rendered, label="Terraform tfvars file")
        return output_path

    def generate_all(self,
                     resources: ResourceSet,
                     imported_variable_names: Optional[Iterable[str]] = None,
                     imported_output_names: Optional[Iterable[str]] = None,
                     include_tfvars: Optional[bool] = None) -> GenerationResult:
        """
        Generate every artifact into the configured output directory

        Args:
            resources: Resources to generate configuration for
            imported_variable_names: Variable names that must not be reused
            imported_output_names: Output names that must not be reused
            include_tfvars: Write terraform.tfvars (config default when None)

        Returns:
            GenerationResult with written files and allocated identifiers
        """
        if include_tfvars is None:
            include_tfvars = self.config.output.include_tfvars

        imported_variable_names = list(imported_variable_names or [])
        imported_output_names = list(imported_output_names or [])

        logger.info(f"Generating Terraform configuration for {resources.total()} resources")
        result = GenerationResult()

        result.files.append(self.generate_main(resources, imported_variable_names))
        result.files.append(self.generate_provider())

        written, registry = self._generate_variables(resources, imported_variable_names)
        result.files.extend(written.keys())
        result.variable_names = registry.allocated

        outputs_path, output_registry = self._generate_outputs(resources, imported_output_names)
        result.files.append(outputs_path)
        result.output_names = output_registry.allocated

        if include_tfvars:
            collected = []
            for content in written.values():
                collected.extend(extract_variable_defaults(content))
            result.variables = filter_duplicate_variables(collected)

            if result.variables:
                result.files.append(self.generate_tfvars(result.variables))
            else:
                logger.info("No variable defaults found, skipping tfvars file")

        logger.info(f"Generation completed: {len(result.files)} files, "
                    f"{len(result.variable_names)} variables, {len(result.output_names)} outputs")
        return result

    def _generate_variables(self,
                            resources: ResourceSet,
                            imported_variable_names: Optional[Iterable[str]] = None,
                            output_dir: Optional[str] = None) -> Tuple[Dict[str, str], NameRegistry]:
        output_dir = Path(output_dir or self.config.output.output_directory)
        written: Dict[str, str] = {}

        global_path = str(output_dir / self.config.output.variables_file)
        global_vars = self.renderer.render(self.GLOBAL_VARIABLES_TEMPLATE, {
            'aws_region': self.config.provider.aws_region,
            'aws_profile': self.config.provider.aws_profile
        })
        self._write_file(global_path, global_vars)
        written[global_path] = global_vars

        projected, registry = project_all_variables(resources, imported_variable_names)

        for entry in self.category_templates:
            if not entry.variables_template:
                continue
            rendered = self._render_template(entry.variables_template,
                                             {entry.key: projected[entry.key]})
            path = str(output_dir / entry.variables_file)
            self._write_file(path, rendered)
            written[path] = rendered

        return written, registry

    def _generate_outputs(self,
                          resources: ResourceSet,
                          imported_output_names: Optional[Iterable[str]] = None,
                          output_path: Optional[str] = None) -> Tuple[str, NameRegistry]:
        output_path = output_path or self.config.output_path(self.config.output.outputs_file)

        projected, registry = project_all_outputs(resources, imported_output_names)
        rendered = self._render_template(OUTPUTS_TEMPLATE, projected)
        self._write_file(output_path, rendered)

        return output_path, registry

    def _render_template(self, name: str, context: Dict[str, Any]) -> str:
        source = self.loader.load(name)
        return self.renderer.render(source, context)

    def _write_file(self, path: str, content: str, label: str = "Terraform file"):
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        logger.info(f"{label} generated: {path}")
