"""
pagesnap - Setup Configuration

DOM snapshot engine for browser agents: compact text views of a page's
document tree with stable element references, plus Markdown/HTML content
extraction.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Core dependencies
core_deps = [
    "pydantic>=2.11.9",
    "pyyaml>=6.0.2",
    # Document tree
    "beautifulsoup4>=4.14.2",
    "lxml>=6.0.2",  # Default HTML parser
    "soupsieve>=2.5",  # CSS selector matching and syntax errors
    # Live capture
    "playwright>=1.55.0",
]

# Development dependencies
dev_deps = [
    # Testing
    "pytest>=8.4.1",
    "pytest-asyncio>=1.0.0",
    "pytest-cov>=6.2.1",
    # Code quality
    "black>=25.0.0",
    "flake8>=7.1.0",
    "mypy>=1.13.0",
]

test_deps = [
    "pytest>=8.4.1",
    "pytest-asyncio>=1.0.0",
    "pytest-cov>=6.2.1",
]

setup(
    name="pagesnap",
    version="0.1.0",

    # Package description
    description="DOM snapshot engine producing compact, reference-annotated text views of web pages",
    long_description=long_description,
    long_description_content_type="text/markdown",

    # Package discovery
    packages=find_packages(where="src"),
    package_dir={"": "src"},

    # Python version requirement
    python_requires=">=3.10",

    # Dependencies
    install_requires=core_deps,

    # Optional dependencies (extras)
    extras_require={
        "test": test_deps,
        "dev": core_deps + dev_deps,
    },

    # PyPI classifiers
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Topic :: Internet :: WWW/HTTP :: Browsers",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Framework :: AsyncIO",
    ],

    keywords=[
        "dom", "snapshot", "accessibility", "browser", "agents",
        "playwright", "markdown", "web-automation",
    ],

    license="Apache-2.0",

    include_package_data=True,
    zip_safe=False,
)
