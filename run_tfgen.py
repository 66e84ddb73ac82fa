#!/usr/bin/env python3
"""
Direct runner for the AWS Terraform Generator
This script can be run directly with Python without installing the package
"""

import sys
import os

# Add the src directory to Python path
current_dir = os.path.dirname(os.path.abspath(__file__))
src_dir = os.path.join(current_dir, 'src')
sys.path.insert(0, src_dir)

from aws_tf_generator.cli import main

if __name__ == "__main__":
    main()
