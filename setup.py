"""
Setup script for csmat

Pure-Python package under src/; the version is read from
src/csmat/__init__.py.
"""

from pathlib import Path
from setuptools import setup, find_packages


# Read version from src/csmat/__init__.py
def get_version():
    version_file = Path("src/csmat/__init__.py")
    if version_file.exists():
        for line in version_file.read_text().splitlines():
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip('"').strip("'")
    return "0.1.0"


# Read long description from README
def get_long_description():
    readme = Path("README.md")
    if readme.exists():
        return readme.read_text(encoding="utf-8")
    return ""


setup(
    name="csmat",
    version=get_version(),
    description="Compressed sparse matrix product kernels (CSR/CSC)",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.20",
    ],
    extras_require={
        "scipy": ["scipy>=1.8"],
        "test": ["pytest>=7", "scipy>=1.8"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Mathematics",
    ],
    zip_safe=True,
)
