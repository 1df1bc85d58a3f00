#!/usr/bin/env python3
"""Setup script for Azure Diagnostic Settings Auditor"""
from setuptools import setup, find_packages

setup(
    name="azure-diag-auditor",
    version="1.0.0",
    description="Audit diagnostic settings coverage across Azure subscriptions",
    author="Azure Cost Optimization Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "azure-core>=1.26.0",
        "azure-identity>=1.12.0",
        "azure-mgmt-resource>=21.0.0,<24.0.0",
        "azure-mgmt-monitor>=6.0.0",
        "azure-mgmt-subscription>=3.1.1",
        "pyyaml>=6.0",
        "rich>=12.0.0",
        "typer>=0.7.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "azure-diag-auditor=azure_diag_auditor.cli.main:main",
        ],
    },
    python_requires=">=3.8",
)
