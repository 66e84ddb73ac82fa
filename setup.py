#!/usr/bin/env python3
"""
AWS Terraform Generator
Generates Terraform configuration from AWS resource descriptors with unique,
stable resource, variable and output names.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="aws-tf-generator",
    version="1.0.0",
    author="AWS Terraform Generator Team",
    description="Generate Terraform main, provider, variables, outputs and tfvars files from AWS resource descriptors",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={
        "aws_tf_generator": [
            "templates/common/*.j2",
            "templates/main/*.j2",
            "templates/variables/*.j2",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: System :: Systems Administration",
        "Topic :: Software Development :: Code Generators",
        "Topic :: Utilities",
    ],
    python_requires=">=3.8",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "aws-tf-generate=aws_tf_generator.cli:main",
            "tfgen=aws_tf_generator.cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
