#!/usr/bin/env python3
"""
End-to-end integration tests for the Terraform generator
"""

import unittest
import sys
import os
import re
import tempfile
import shutil
from pathlib import Path

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../../src'))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../..'))

from aws_tf_generator.config import GeneratorConfig
from aws_tf_generator.generator import TerraformGenerator
from aws_tf_generator.resources import ResourceSet, Instance, Bucket, resource_set_from_dict
from test.fixtures.sample_resources import FULL_STACK_DOCUMENT, SIMPLE_COMPUTE_DOCUMENT


class TestEndToEndGeneration(unittest.TestCase):
    """End-to-end tests with the packaged templates"""

    def setUp(self):
        """Set up test environment"""
        self.temp_dir = tempfile.mkdtemp()
        self.config = GeneratorConfig()
        self.config.output.output_directory = self.temp_dir
        self.generator = TerraformGenerator(self.config)

    def tearDown(self):
        """Clean up test environment"""
        shutil.rmtree(self.temp_dir)

    def _read(self, name):
        return Path(self.temp_dir, name).read_text()

    def _declared_variables(self):
        declared = []
        for path in sorted(Path(self.temp_dir).glob('variables*.tf')):
            declared.extend(re.findall(r'variable "([^"]+)"', path.read_text()))
        return declared

    def test_full_stack_generation(self):
        """Test generation with one resource in every category"""
        resources = resource_set_from_dict(FULL_STACK_DOCUMENT)

        result = self.generator.generate_all(resources, include_tfvars=True)

        for name in ['main.tf', 'provider.tf', 'variables.tf', 'outputs.tf', 'terraform.tfvars',
                     'variables_ec2.tf', 'variables_ecs_task_definition.tf', 'variables_alb_target_group.tf']:
            self.assertTrue(os.path.exists(os.path.join(self.temp_dir, name)), name)
        self.assertEqual(len(result.files), 17)

        main_tf = self._read('main.tf')
        for resource_type in ['aws_instance', 'aws_s3_bucket', 'aws_security_group', 'aws_vpc',
                              'aws_subnet', 'aws_internet_gateway', 'aws_route_table',
                              'aws_ecs_cluster', 'aws_ecs_service', 'aws_ecs_task_definition',
                              'aws_lb', 'aws_lb_listener', 'aws_lb_target_group']:
            self.assertIn(f'resource "{resource_type}"', main_tf)

        # Categories appear in the fixed order
        self.assertLess(main_tf.index('resource "aws_instance"'), main_tf.index('resource "aws_s3_bucket"'))
        self.assertLess(main_tf.index('resource "aws_vpc"'), main_tf.index('resource "aws_subnet"'))

    def test_every_referenced_variable_is_declared(self):
        """Test that main.tf and provider.tf only reference declared variables"""
        resources = resource_set_from_dict(FULL_STACK_DOCUMENT)

        self.generator.generate_all(resources)

        declared = self._declared_variables()
        referenced = set(re.findall(r'var\.([A-Za-z0-9_]+)', self._read('main.tf') + self._read('provider.tf')))

        self.assertTrue(referenced)
        self.assertTrue(referenced.issubset(set(declared)), referenced - set(declared))
        self.assertEqual(len(declared), len(set(declared)))

    def test_identifiers_unique_across_categories(self):
        """Test that the subnet and route table both named 'public' get distinct vpc_id variables"""
        resources = resource_set_from_dict(FULL_STACK_DOCUMENT)

        result = self.generator.generate_all(resources)

        self.assertIn('public_vpc_id', result.variable_names)
        self.assertIn('public_vpc_id_1', result.variable_names)
        self.assertIn('variable "public_vpc_id_1"', self._read('variables_route_table.tf'))
        self.assertIn('vpc_id = var.public_vpc_id_1', self._read('main.tf'))
        self.assertEqual(len(result.variable_names), len(set(result.variable_names)))

    def test_task_definition_revision_names(self):
        resources = resource_set_from_dict(FULL_STACK_DOCUMENT)

        self.generator.generate_all(resources)

        variables = self._read('variables_ecs_task_definition.tf')
        self.assertIn('variable "api_3_family"', variables)
        self.assertIn('variable "api_3_tags"', variables)
        self.assertIn('(revision 3)', variables)
        self.assertIn('var.api_3_family', self._read('main.tf'))
        self.assertIn('tags                     = var.api_3_tags', self._read('main.tf'))

    def test_outputs(self):
        resources = resource_set_from_dict(FULL_STACK_DOCUMENT)

        result = self.generator.generate_all(resources)

        outputs_tf = self._read('outputs.tf')
        declared = re.findall(r'output "([^"]+)"', outputs_tf)
        self.assertEqual(declared, result.output_names)
        self.assertEqual(len(declared), len(set(declared)))
        self.assertIn('output "bastion_instance_id"', outputs_tf)
        self.assertIn('value       = aws_instance.bastion.id', outputs_tf)
        self.assertIn('output "public_lb_dns_name"', outputs_tf)

    def test_tfvars(self):
        resources = resource_set_from_dict(FULL_STACK_DOCUMENT)

        result = self.generator.generate_all(resources, include_tfvars=True)

        tfvars = self._read('terraform.tfvars')
        self.assertIn('aws_region = "us-east-1"', tfvars)
        self.assertIn('bastion_ami = "ami-11112222"', tfvars)
        self.assertNotIn('api_3_tags', tfvars)
        names = [variable['name'] for variable in result.variables]
        self.assertEqual(len(names), len(set(names)))

    def test_tfvars_quoted_default(self):
        """Test that a default containing a double quote reaches tfvars intact"""
        resources = ResourceSet(buckets=[Bucket(resource_name='b', bucket='my"bucket')])

        result = self.generator.generate_all(resources, include_tfvars=True)

        self.assertIn({'name': 'b_bucket', 'default': 'my"bucket'}, result.variables)
        self.assertIn('b_bucket = "my\\"bucket"', self._read('terraform.tfvars'))

    def test_duplicate_names_with_explicit_suffix(self):
        """Test that web, web, web_1 produce three distinct instance blocks"""
        resources = ResourceSet(instances=[
            Instance(resource_name='web'), Instance(resource_name='web'), Instance(resource_name='web_1')
        ])

        self.generator.generate_all(resources)

        main_tf = self._read('main.tf')
        declared = re.findall(r'resource "aws_instance" "([^"]+)"', main_tf)
        self.assertEqual(declared, ['web', 'web_2', 'web_1'])

    def test_imported_variable_names(self):
        """Test that imported names are skipped consistently in main.tf and variables"""
        resources = resource_set_from_dict(FULL_STACK_DOCUMENT)

        result = self.generator.generate_all(resources, imported_variable_names=['bastion_ami'])

        self.assertNotIn('bastion_ami', result.variable_names)
        self.assertIn('variable "bastion_ami_1"', self._read('variables_ec2.tf'))
        self.assertNotIn('variable "bastion_ami"', self._read('variables_ec2.tf'))
        self.assertIn('ami           = var.bastion_ami_1', self._read('main.tf'))

    def test_buckets_only(self):
        """Test that only non-empty categories produce blocks"""
        resources = ResourceSet(buckets=[Bucket(resource_name='logs', bucket='company-logs')])

        self.generator.generate_all(resources)

        main_tf = self._read('main.tf')
        self.assertIn('resource "aws_s3_bucket" "logs"', main_tf)
        self.assertIn('bucket = var.logs_bucket', main_tf)
        self.assertEqual(main_tf.count('resource "'), 1)
        self.assertEqual(self._read('variables_ec2.tf').strip(), '')

    def test_duplicate_and_empty_names(self):
        resources = resource_set_from_dict(SIMPLE_COMPUTE_DOCUMENT)
        resources.instances.extend([Instance(), Instance()])

        self.generator.generate_all(resources)

        main_tf = self._read('main.tf')
        self.assertIn('resource "aws_instance" "web"', main_tf)
        self.assertIn('resource "aws_instance" "web_1"', main_tf)
        self.assertIn('resource "aws_instance" "resource"', main_tf)
        self.assertIn('resource "aws_instance" "resource_1"', main_tf)
        self.assertIn('var.web_1_ami', main_tf)

    def test_rerun_is_byte_identical(self):
        """Test that generating twice into separate directories gives identical files"""
        resources = resource_set_from_dict(FULL_STACK_DOCUMENT)
        second_dir = tempfile.mkdtemp()

        try:
            first = self.generator.generate_all(resources, ['bastion_ami'], ['main_vpc_id'], True)

            second_config = GeneratorConfig()
            second_config.output.output_directory = second_dir
            second = TerraformGenerator(second_config).generate_all(
                resources, ['bastion_ami'], ['main_vpc_id'], True
            )

            self.assertEqual(first.variable_names, second.variable_names)
            self.assertEqual(first.output_names, second.output_names)
            for path in first.files:
                name = os.path.basename(path)
                self.assertEqual(Path(path).read_bytes(), Path(second_dir, name).read_bytes(), name)
        finally:
            shutil.rmtree(second_dir)

    def test_rerun_overwrites(self):
        self.generator.generate_all(resource_set_from_dict(FULL_STACK_DOCUMENT))
        self.generator.generate_all(ResourceSet(buckets=[Bucket(resource_name='logs')]))

        self.assertNotIn('aws_instance', self._read('main.tf'))


if __name__ == '__main__':
    unittest.main()
