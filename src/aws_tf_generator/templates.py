#!/usr/bin/env python3
"""
Template Configuration and Rendering

The category table maps each resource category to its main.tf block template
and, where the category declares variables, to its variables template and the
file it is written to. Rendering goes through a small renderer interface so
tests can substitute a deterministic stub for Jinja2.
"""

import logging
from typing import Dict, Optional, Any, Tuple
from dataclasses import dataclass
from pathlib import Path
from jinja2 import Template

from .resources import CATEGORY_ORDER

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

PROVIDER_TEMPLATE = "common/provider.tf.j2"
OUTPUTS_TEMPLATE = "common/outputs.tf.j2"
TFVARS_TEMPLATE = "variables/terraform.tfvars.j2"


@dataclass(frozen=True)
class CategoryTemplates:
    """Templates and output file for one resource category"""
    key: str
    main_template: str
    variables_template: Optional[str] = None
    variables_file: Optional[str] = None


DEFAULT_CATEGORY_TEMPLATES: Tuple[CategoryTemplates, ...] = (
    CategoryTemplates('instances', 'main/main.ec2.tf.j2',
                      'variables/variables_ec2.tf.j2', 'variables_ec2.tf'),
    CategoryTemplates('buckets', 'main/main.s3.tf.j2',
                      'variables/variables_s3.tf.j2', 'variables_s3.tf'),
    CategoryTemplates('security_groups', 'main/main.security_group.tf.j2'),
    CategoryTemplates('vpcs', 'main/main.vpc.tf.j2',
                      'variables/variables_vpc.tf.j2', 'variables_vpc.tf'),
    CategoryTemplates('subnets', 'main/main.subnet.tf.j2',
                      'variables/variables_subnet.tf.j2', 'variables_subnet.tf'),
    CategoryTemplates('internet_gateways', 'main/main.igw.tf.j2',
                      'variables/variables_igw.tf.j2', 'variables_igw.tf'),
    CategoryTemplates('route_tables', 'main/main.route_table.tf.j2',
                      'variables/variables_route_table.tf.j2', 'variables_route_table.tf'),
    CategoryTemplates('ecs_clusters', 'main/main.ecs_cluster.tf.j2',
                      'variables/variables_ecs_cluster.tf.j2', 'variables_ecs_cluster.tf'),
    CategoryTemplates('ecs_services', 'main/main.ecs_service.tf.j2',
                      'variables/variables_ecs_service.tf.j2', 'variables_ecs_service.tf'),
    CategoryTemplates('ecs_task_definitions', 'main/main.ecs_task_definition.tf.j2',
                      'variables/variables_ecs_task_definition.tf.j2',
                      'variables_ecs_task_definition.tf'),
    CategoryTemplates('load_balancers', 'main/main.alb.tf.j2',
                      'variables/variables_alb.tf.j2', 'variables_alb.tf'),
    CategoryTemplates('listeners', 'main/main.alb_listener.tf.j2',
                      'variables/variables_alb_listener.tf.j2', 'variables_alb_listener.tf'),
    CategoryTemplates('target_groups', 'main/main.alb_target_group.tf.j2',
                      'variables/variables_alb_target_group.tf.j2',
                      'variables_alb_target_group.tf'),
)


def validate_category_templates(table: Tuple[CategoryTemplates, ...]):
    """Check that a category table covers every category exactly once, in order"""
    keys = tuple(entry.key for entry in table)
    if keys != CATEGORY_ORDER:
        raise ValueError(f"Category templates must follow {CATEGORY_ORDER}, got {keys}")

    for entry in table:
        if bool(entry.variables_template) != bool(entry.variables_file):
            raise ValueError(
                f"Category {entry.key} needs both a variables template and a variables file"
            )


class TemplateRenderer:
    """Renders a template source string against a plain context"""

    def render(self, source: str, context: Dict[str, Any]) -> str:
        raise NotImplementedError


class JinjaRenderer(TemplateRenderer):
    """Jinja2 renderer used for all generated Terraform files"""

    def render(self, source: str, context: Dict[str, Any]) -> str:
        template = Template(
            source,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True
        )
        return template.render(**context)


class TemplateLoader:
    """Reads template sources from a template directory"""

    def __init__(self, template_dir: Optional[str] = None):
        self.template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR

    def load(self, name: str) -> str:
        """Return the source of a template; a missing file raises FileNotFoundError"""
        template_path = self.template_dir / name
        logger.debug(f"Loading template {template_path}")
        with open(template_path, 'r', encoding='utf-8') as f:
            return f.read()
