"""
AWS Terraform Generator

Generates main.tf, provider.tf, variables, outputs and tfvars files from AWS
resource descriptors, with deterministic and collision-free identifiers.
"""

__version__ = "1.0.0"
__author__ = "AWS Terraform Generator Team"

from .resources import ResourceSet, load_resource_set
from .naming import NameRegistry, make_resource_names_unique, make_name_globally_unique
from .generator import TerraformGenerator, GenerationResult
from .config import ConfigManager, GeneratorConfig

__all__ = [
    "ResourceSet",
    "load_resource_set",
    "NameRegistry",
    "make_resource_names_unique",
    "make_name_globally_unique",
    "TerraformGenerator",
    "GenerationResult",
    "ConfigManager",
    "GeneratorConfig"
]
