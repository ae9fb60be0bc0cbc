#!/usr/bin/env python3
"""
Setup script for Storefront.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
if requirements_file.exists():
    requirements = [
        line.strip()
        for line in requirements_file.read_text().splitlines()
        if line.strip() and not line.startswith("#")
    ]

setup(
    name="storefront",
    version="0.1.0",
    description="Async order lifecycle engine: stock, payments, refunds and order mail",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Storefront Contributors",
    packages=find_packages(include=["storefront", "storefront.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=requirements + [
        "stripe>=8.0.0",
        "aiosmtplib>=3.0.0",
        "python-dotenv>=1.0.0",
        "jinja2>=3.1.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.1.0",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Office/Business :: Financial :: Point-Of-Sale",
    ],
    keywords="ecommerce orders inventory payments stripe async",
)
