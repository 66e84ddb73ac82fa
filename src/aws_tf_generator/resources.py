#!/usr/bin/env python3
"""
Resource Descriptors

This module defines the typed resource descriptors consumed by the Terraform
generator, the fixed category order used for every generated artifact, and
loading helpers that build a ResourceSet from a YAML or JSON document produced
by an upstream resource mapper.
"""

import json
import re
import logging
from typing import Dict, List, Optional, Any, Tuple, Type
from dataclasses import dataclass, field, fields
from pathlib import Path
import yaml
from jsonschema import validate, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class Instance:
    """EC2 instance"""
    category = "instances"

    resource_name: str = ""
    instance_id: Optional[str] = None
    ami: Optional[str] = None
    instance_type: Optional[str] = None
    subnet_id: Optional[str] = None
    vpc_id: Optional[str] = None
    key_name: Optional[str] = None
    security_group_ids: List[str] = field(default_factory=list)
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass
class Bucket:
    """S3 bucket"""
    category = "buckets"

    resource_name: str = ""
    bucket: Optional[str] = None
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass
class SecurityGroup:
    """EC2 security group with inline ingress/egress rules"""
    category = "security_groups"

    resource_name: str = ""
    group_id: Optional[str] = None
    group_name: Optional[str] = None
    description: Optional[str] = None
    vpc_id: Optional[str] = None
    ingress: List[Dict[str, Any]] = field(default_factory=list)
    egress: List[Dict[str, Any]] = field(default_factory=list)
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass
class Vpc:
    """VPC"""
    category = "vpcs"

    resource_name: str = ""
    vpc_id: Optional[str] = None
    cidr_block: Optional[str] = None
    enable_dns_support: Optional[bool] = None
    enable_dns_hostnames: Optional[bool] = None
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass
class Subnet:
    """VPC subnet"""
    category = "subnets"

    resource_name: str = ""
    subnet_id: Optional[str] = None
    vpc_id: Optional[str] = None
    cidr_block: Optional[str] = None
    availability_zone: Optional[str] = None
    map_public_ip_on_launch: Optional[bool] = None
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass
class InternetGateway:
    """Internet gateway"""
    category = "internet_gateways"

    resource_name: str = ""
    internet_gateway_id: Optional[str] = None
    vpc_id: Optional[str] = None
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass
class RouteTable:
    """Route table"""
    category = "route_tables"

    resource_name: str = ""
    route_table_id: Optional[str] = None
    vpc_id: Optional[str] = None
    routes: List[Dict[str, Any]] = field(default_factory=list)
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass
class EcsCluster:
    """ECS cluster"""
    category = "ecs_clusters"

    resource_name: str = ""
    cluster_name: Optional[str] = None
    cluster_arn: Optional[str] = None
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass
class EcsService:
    """ECS service"""
    category = "ecs_services"

    resource_name: str = ""
    service_name: Optional[str] = None
    service_arn: Optional[str] = None
    cluster_arn: Optional[str] = None
    task_definition: Optional[str] = None
    desired_count: Optional[int] = None
    launch_type: Optional[str] = None
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass
class EcsTaskDefinition:
    """ECS task definition (one revision)"""
    category = "ecs_task_definitions"

    resource_name: str = ""
    task_definition_arn: Optional[str] = None
    family: Optional[str] = None
    cpu: Optional[str] = None
    memory: Optional[str] = None
    network_mode: Optional[str] = None
    requires_compatibilities: List[str] = field(default_factory=list)
    execution_role_arn: Optional[str] = None
    container_definitions: Optional[str] = None
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass
class LoadBalancer:
    """Application/network load balancer"""
    category = "load_balancers"

    resource_name: str = ""
    load_balancer_arn: Optional[str] = None
    name: Optional[str] = None
    load_balancer_type: Optional[str] = None
    scheme: Optional[str] = None
    subnets: List[str] = field(default_factory=list)
    security_groups: List[str] = field(default_factory=list)
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass
class Listener:
    """Load balancer listener"""
    category = "listeners"

    resource_name: str = ""
    listener_arn: Optional[str] = None
    load_balancer_arn: Optional[str] = None
    port: Optional[int] = None
    protocol: Optional[str] = None
    default_actions: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class TargetGroup:
    """Load balancer target group"""
    category = "target_groups"

    resource_name: str = ""
    target_group_arn: Optional[str] = None
    name: Optional[str] = None
    port: Optional[int] = None
    protocol: Optional[str] = None
    vpc_id: Optional[str] = None
    target_type: Optional[str] = None
    health_check: Dict[str, Any] = field(default_factory=dict)
    tags: Dict[str, str] = field(default_factory=dict)


# Fixed category order; controls block order in main.tf and allocation order
CATEGORY_ORDER: Tuple[str, ...] = (
    'instances',
    'buckets',
    'security_groups',
    'vpcs',
    'subnets',
    'internet_gateways',
    'route_tables',
    'ecs_clusters',
    'ecs_services',
    'ecs_task_definitions',
    'load_balancers',
    'listeners',
    'target_groups',
)

RESOURCE_CLASSES: Dict[str, Type] = {
    cls.category: cls for cls in (
        Instance, Bucket, SecurityGroup, Vpc, Subnet, InternetGateway,
        RouteTable, EcsCluster, EcsService, EcsTaskDefinition,
        LoadBalancer, Listener, TargetGroup,
    )
}

TERRAFORM_TYPES: Dict[str, str] = {
    'instances': 'aws_instance',
    'buckets': 'aws_s3_bucket',
    'security_groups': 'aws_security_group',
    'vpcs': 'aws_vpc',
    'subnets': 'aws_subnet',
    'internet_gateways': 'aws_internet_gateway',
    'route_tables': 'aws_route_table',
    'ecs_clusters': 'aws_ecs_cluster',
    'ecs_services': 'aws_ecs_service',
    'ecs_task_definitions': 'aws_ecs_task_definition',
    'load_balancers': 'aws_lb',
    'listeners': 'aws_lb_listener',
    'target_groups': 'aws_lb_target_group',
}


@dataclass
class ResourceSet:
    """Ordered resource descriptors for every category of one generation run"""
    instances: List[Instance] = field(default_factory=list)
    buckets: List[Bucket] = field(default_factory=list)
    security_groups: List[SecurityGroup] = field(default_factory=list)
    vpcs: List[Vpc] = field(default_factory=list)
    subnets: List[Subnet] = field(default_factory=list)
    internet_gateways: List[InternetGateway] = field(default_factory=list)
    route_tables: List[RouteTable] = field(default_factory=list)
    ecs_clusters: List[EcsCluster] = field(default_factory=list)
    ecs_services: List[EcsService] = field(default_factory=list)
    ecs_task_definitions: List[EcsTaskDefinition] = field(default_factory=list)
    load_balancers: List[LoadBalancer] = field(default_factory=list)
    listeners: List[Listener] = field(default_factory=list)
    target_groups: List[TargetGroup] = field(default_factory=list)

    def get(self, category: str) -> List[Any]:
        """Return the resources for a category key"""
        if category not in RESOURCE_CLASSES:
            raise ValueError(f"Unknown resource category: {category}")
        return getattr(self, category)

    def items(self) -> List[Tuple[str, List[Any]]]:
        """Return (category, resources) pairs in the fixed category order"""
        return [(category, getattr(self, category)) for category in CATEGORY_ORDER]

    def total(self) -> int:
        return sum(len(resources) for _, resources in self.items())


# Shape check for resource documents; attribute values are not validated
RESOURCE_DOCUMENT_SCHEMA = {
    "type": "object",
    "properties": {
        category: {"type": "array", "items": {"type": "object"}}
        for category in CATEGORY_ORDER
    },
    "additionalProperties": False
}

# Upstream mappers emit camelCase category keys
_CATEGORY_ALIASES = {
    'ec2': 'instances',
    's3': 'buckets',
    'securityGroups': 'security_groups',
    'igws': 'internet_gateways',
    'internetGateways': 'internet_gateways',
    'routeTables': 'route_tables',
    'ecsClusters': 'ecs_clusters',
    'ecsServices': 'ecs_services',
    'ecsTaskDefs': 'ecs_task_definitions',
    'ecsTaskDefinitions': 'ecs_task_definitions',
    'albs': 'load_balancers',
    'loadBalancers': 'load_balancers',
    'albListeners': 'listeners',
    'albTargetGroups': 'target_groups',
    'targetGroups': 'target_groups',
}


def _snake_case(key: str) -> str:
    """Convert a camelCase attribute key to snake_case"""
    return re.sub('([a-z0-9])([A-Z])', r'\1_\2', key).lower()


def resource_from_dict(category: str, data: Dict[str, Any]) -> Any:
    """
    Build a resource descriptor from an attribute mapping

    Args:
        category: Category key (e.g. 'instances')
        data: Attribute mapping with snake_case or camelCase keys

    Returns:
        Descriptor instance for the category
    """
    if category not in RESOURCE_CLASSES:
        raise ValueError(f"Unknown resource category: {category}")

    resource_cls = RESOURCE_CLASSES[category]
    known = {f.name for f in fields(resource_cls)}
    kwargs = {}

    for key, value in data.items():
        name = _snake_case(key)
        if name in known:
            kwargs[name] = value
        else:
            logger.warning(f"Ignoring unknown attribute '{key}' on {category} resource")

    if kwargs.get('resource_name') is None:
        kwargs['resource_name'] = ""

    return resource_cls(**kwargs)


def resource_set_from_dict(document: Dict[str, Any]) -> ResourceSet:
    """
    Build a ResourceSet from a mapping of category keys to attribute mappings

    A category given under both its key and an alias (e.g. 'instances' and
    'ec2') is merged in document order.
    """
    normalized = {}
    for key, value in (document or {}).items():
        category = _CATEGORY_ALIASES.get(key, key)
        if category not in normalized:
            normalized[category] = value
            continue

        if not isinstance(value, list) or not isinstance(normalized[category], list):
            raise ValueError(f"Invalid resource document: '{key}' repeats category '{category}'")
        logger.warning(f"Merging resources given under '{key}' into category '{category}'")
        normalized[category] = normalized[category] + value

    try:
        validate(instance=normalized, schema=RESOURCE_DOCUMENT_SCHEMA)
    except ValidationError as e:
        raise ValueError(f"Invalid resource document: {e.message}")

    resource_set = ResourceSet()
    for category, items in normalized.items():
        setattr(resource_set, category, [resource_from_dict(category, item) for item in items])

    logger.debug(f"Loaded {resource_set.total()} resources")
    return resource_set


def load_resource_set(path: str) -> ResourceSet:
    """Load a ResourceSet from a YAML or JSON file"""
    input_path = Path(path).expanduser()

    with open(input_path, 'r') as f:
        if input_path.suffix.lower() in ['.yaml', '.yml']:
            document = yaml.safe_load(f)
        elif input_path.suffix.lower() == '.json':
            document = json.load(f)
        else:
            raise ValueError(f"Unsupported resource file format: {input_path.suffix}")

    logger.info(f"Loading resources from {input_path}")
    return resource_set_from_dict(document)
