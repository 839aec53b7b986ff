"""
Setup configuration for the Stack Exchange dump loader.
Use this for:
- Creating a Distributable Package
- Installing the stackdump_loader console script

If you're just setting up another development environment, consider using `pip install -e .[dev]` instead.

For Distributable Package:
- python setup.py sdist bdist_wheel
    (Creates installable .whl files in dist/ folder)
"""

from setuptools import setup, find_packages
from pathlib import Path

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

# Separate main requirements from development and optional requirements
main_requirements = []
dev_requirements = []
optional_requirements = []

for req in requirements:
    if "# Optional:" in req:
        optional_requirements.append(req.split("#", 1)[0].strip())
    elif any(dev_pkg in req for dev_pkg in ["pytest", "black", "flake8", "mypy"]):
        dev_requirements.append(req.split("#", 1)[0].strip())
    else:
        main_requirements.append(req.split("#", 1)[0].strip())

setup(
    name="stackdump_loader",
    version="1.0.0",
    author="Stackdump Loader Team",
    description="Streaming bulk loader for Stack Exchange XML data dumps into relational tables.",
    long_description=Path("README.md").read_text(encoding="utf-8"),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["stackdump_loader", "stackdump_loader.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3.8",
        "Topic :: Database",
        "Topic :: Text Processing :: Markup :: XML",
    ],
    python_requires=">=3.8",
    install_requires=main_requirements,
    extras_require={
        "dev": dev_requirements,
        "optional": optional_requirements,
    },
    entry_points={
        "console_scripts": [
            "stackdump_loader=stackdump_loader.cli:main",
        ],
    },
)
