"""
capfs - Setup Configuration

Asynchronous filesystem access with a path algebra, structured data loaders
and a virtual overlay that confines paths to a capped directory tree.

License: Apache-2.0
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Core dependencies
core_deps = [
    # Validation
    "pydantic>=2.11.9",
    # Async file I/O
    "aiofiles>=24.1.0",
    # Data loaders
    "pyyaml>=6.0.2",
    "json5>=0.9.25",
    # UI/Terminal
    "rich>=14.1.0",
    "click>=8.1.7",
]

# Development dependencies
dev_deps = [
    # Testing
    "pytest>=8.4.1",
    "pytest-asyncio>=1.0.0",
    "pytest-mock>=3.14.1",
    "pytest-cov>=6.2.1",
    # Code quality
    "black>=25.0.0",
    "flake8>=7.1.0",
    "mypy>=1.13.0",
    "types-aiofiles>=24.1.0",
    "types-PyYAML>=6.0.12",
]

setup(
    name="capfs",
    version="0.1.0",

    # Package description
    description="Asynchronous filesystem entries with a capped virtual overlay",
    long_description=long_description,
    long_description_content_type="text/markdown",

    # Package discovery
    packages=find_packages(where="src"),
    package_dir={"": "src"},

    # Python version requirement
    python_requires=">=3.11",

    # Dependencies
    install_requires=core_deps,

    # Optional dependencies (extras)
    extras_require={
        # Core alias (same as default)
        "core": core_deps,

        # Development: testing + code quality
        "dev": core_deps + dev_deps,
    },

    # PyPI classifiers
    classifiers=[
        # Development status
        "Development Status :: 4 - Beta",

        # Audience
        "Intended Audience :: Developers",

        # License
        "License :: OSI Approved :: Apache Software License",

        # OS
        "Operating System :: OS Independent",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS",

        # Python versions
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Programming Language :: Python :: 3 :: Only",

        # Topics
        "Topic :: System :: Filesystems",
        "Topic :: Software Development :: Libraries :: Python Modules",

        # Framework
        "Framework :: AsyncIO",
    ],

    keywords=["filesystem", "async", "aiofiles", "sandbox", "virtual-filesystem", "yaml", "json5"],

    # License
    license="Apache-2.0",

    # Package data
    include_package_data=True,
    zip_safe=False,

    # Entry points
    entry_points={
        "console_scripts": [
            "capfs=capfs.cli:main",
        ],
    },
)
