#!/usr/bin/env python3
"""
Variable and Output Projection

For each resource category this module declares which optional attributes are
lifted into Terraform variables and which computed attributes are exposed as
outputs. Projection attaches the allocated identifiers to each resource so
that main.tf, the variables files and outputs.tf all agree on the same names.
"""

import logging
from typing import Dict, List, Optional, Any, Iterable, Tuple
from dataclasses import dataclass, field

from .naming import NameRegistry, make_resource_names_unique
from .resources import CATEGORY_ORDER, ResourceSet

logger = logging.getLogger(__name__)


@dataclass
class EnrichedResource:
    """A resource descriptor plus its allocated identifiers"""
    resource: Any
    names: Dict[str, str] = field(default_factory=dict)
    revision: Optional[str] = None

    @property
    def resource_name(self) -> str:
        return self.resource.resource_name


# (descriptor field, suffix token) pairs lifted into variables when present
VARIABLE_ATTRIBUTES: Dict[str, Tuple[Tuple[str, str], ...]] = {
    'instances': (
        ('ami', 'ami'),
        ('instance_type', 'instance_type'),
        ('subnet_id', 'subnet_id'),
        ('vpc_id', 'vpc_id'),
    ),
    'buckets': (
        ('bucket', 'bucket'),
    ),
    'vpcs': (
        ('cidr_block', 'cidr_block'),
    ),
    'subnets': (
        ('cidr_block', 'cidr_block'),
        ('availability_zone', 'availability_zone'),
        ('vpc_id', 'vpc_id'),
    ),
    'internet_gateways': (
        ('vpc_id', 'vpc_id'),
    ),
    'route_tables': (
        ('vpc_id', 'vpc_id'),
    ),
    'ecs_clusters': (
        ('cluster_arn', 'cluster_arn'),
    ),
    'ecs_services': (
        ('service_arn', 'service_arn'),
        ('cluster_arn', 'cluster_arn'),
    ),
    'ecs_task_definitions': (
        ('task_definition_arn', 'taskdef_arn'),
        ('family', 'family'),
        ('cpu', 'cpu'),
        ('memory', 'memory'),
        ('network_mode', 'network_mode'),
    ),
    'load_balancers': (
        ('load_balancer_arn', 'lb_arn'),
    ),
    'listeners': (
        ('listener_arn', 'listener_arn'),
    ),
    'target_groups': (
        ('target_group_arn', 'tg_arn'),
    ),
}

# Task definitions always get a tags variable
ALWAYS_ALLOCATED: Dict[str, Tuple[str, ...]] = {
    'ecs_task_definitions': ('tags',),
}

# Output prefix per category and the computed attributes exposed as outputs
OUTPUT_ATTRIBUTES: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    'instances': ('instance', ('id', 'public_ip', 'private_ip')),
    'buckets': ('bucket', ('id', 'arn')),
    'security_groups': ('sg', ('id',)),
    'vpcs': ('vpc', ('id',)),
    'subnets': ('subnet', ('id',)),
    'internet_gateways': ('igw', ('id',)),
    'route_tables': ('route_table', ('id',)),
    'ecs_clusters': ('ecs_cluster', ('id', 'arn')),
    'ecs_services': ('ecs_service', ('id',)),
    'ecs_task_definitions': ('task_definition', ('arn', 'revision')),
    'load_balancers': ('lb', ('arn', 'dns_name')),
    'listeners': ('listener', ('arn',)),
    'target_groups': ('target_group', ('arn',)),
}


def extract_revision(task_definition_arn: Optional[str]) -> Optional[str]:
    """Return the trailing ':'-separated segment of a task definition ARN"""
    if not task_definition_arn:
        return None
    return task_definition_arn.split(':')[-1] or None


def project_variables(category: str, resources: Iterable[Any],
                      registry: NameRegistry) -> List[EnrichedResource]:
    """
    Allocate variable identifiers for one category

    Args:
        category: Category key
        resources: Uniquified descriptors of that category
        registry: Registry shared by the whole generation call

    Returns:
        Enriched resources in input order
    """
    if category not in VARIABLE_ATTRIBUTES:
        raise ValueError(f"Category has no variable projection: {category}")

    attributes = VARIABLE_ATTRIBUTES[category]
    always = ALWAYS_ALLOCATED.get(category, ())
    enriched = []

    for resource in resources:
        base_name = resource.resource_name
        revision = None

        if category == 'ecs_task_definitions':
            revision = extract_revision(resource.task_definition_arn)
            if revision:
                base_name = f"{base_name}_{revision}"

        names = {}
        for attr, suffix in attributes:
            if getattr(resource, attr, None):
                names[suffix] = registry.allocate(f"{base_name}_{suffix}")

        for suffix in always:
            names[suffix] = registry.allocate(f"{base_name}_{suffix}")

        enriched.append(EnrichedResource(resource=resource, names=names, revision=revision))

    logger.debug(f"Projected variables for {len(enriched)} {category}")
    return enriched


def project_outputs(category: str, resources: Iterable[Any],
                    registry: NameRegistry) -> List[EnrichedResource]:
    """Allocate output identifiers for one category"""
    prefix, attributes = OUTPUT_ATTRIBUTES[category]
    enriched = []

    for resource in resources:
        names = {
            attr: registry.allocate(f"{resource.resource_name}_{prefix}_{attr}")
            for attr in attributes
        }
        enriched.append(EnrichedResource(resource=resource, names=names))

    return enriched


def uniquify_all(resource_set: ResourceSet) -> Dict[str, List[Any]]:
    """Uniquify resource names per category, keyed by category in fixed order"""
    return {
        category: make_resource_names_unique(resources)
        for category, resources in resource_set.items()
    }


def project_all_variables(resource_set: ResourceSet,
                          imported_names: Optional[Iterable[str]] = None
                          ) -> Tuple[Dict[str, List[EnrichedResource]], NameRegistry]:
    """
    Uniquify and project every category with one shared registry

    Categories without variable attributes are wrapped with empty name
    mappings. Allocation follows CATEGORY_ORDER, so the same input always
    yields the same identifiers.
    """
    registry = NameRegistry(imported_names)
    projected = {}

    for category, resources in uniquify_all(resource_set).items():
        if category in VARIABLE_ATTRIBUTES:
            projected[category] = project_variables(category, resources, registry)
        else:
            projected[category] = [EnrichedResource(resource=r) for r in resources]

    return projected, registry


def project_all_outputs(resource_set: ResourceSet,
                        imported_names: Optional[Iterable[str]] = None
                        ) -> Tuple[Dict[str, List[EnrichedResource]], NameRegistry]:
    """Uniquify every category and allocate output identifiers with one registry"""
    registry = NameRegistry(imported_names)
    projected = {
        category: project_outputs(category, resources, registry)
        for category, resources in uniquify_all(resource_set).items()
    }
    return projected, registry


__all__ = [
    'CATEGORY_ORDER',
    'EnrichedResource',
    'VARIABLE_ATTRIBUTES',
    'OUTPUT_ATTRIBUTES',
    'extract_revision',
    'project_variables',
    'project_outputs',
    'project_all_variables',
    'project_all_outputs',
    'uniquify_all',
]
