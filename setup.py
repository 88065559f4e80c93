"""Setup script for the MCP stdio-to-HTTP bridge."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="mcp-inbridge",
    version="1.1.0",
    description="Stdio JSON-RPC bridge for streamable-HTTP MCP servers",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["mcp_inbridge", "mcp_inbridge.*"]),
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "requests>=2.28.0",
        "pydantic>=2.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "fastapi>=0.100.0",
            "httpx>=0.24.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "mcp-inbridge=mcp_inbridge.cli:main",
        ],
    },
)
