#!/usr/bin/env python3
"""
Setup script for the Generative Language API client
"""

from setuptools import setup, find_packages
import os

# Read the README file
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Get version from environment or default
version = os.getenv("VERSION", "0.1.0")

setup(
    name="generative-language",
    version=version,
    description="Async client for the Google Generative Language API with streaming and function calling",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    python_requires=">=3.10",
    install_requires=[
        "httpx>=0.27.0,<1.0.0",
        "pydantic>=2.4.0,<3.0.0",
        "typing-extensions>=4.13.2,<5.0.0",
        "opentelemetry-api>=1.30.0,<2.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=8.0.0,<9.0.0",
            "pytest-asyncio>=1.0.0,<1.4.0",
            "pytest-cov>=7.0.0,<8.0.0",
        ],
    },
    include_package_data=True,
    keywords=[
        "gemini",
        "generative-ai",
        "llm",
        "function-calling",
        "streaming",
    ],
    zip_safe=False,
)
