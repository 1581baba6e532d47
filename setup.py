#!/usr/bin/env python3
"""
Setup configuration for the PDF Orientation Engine
Detects rotated and upside-down PDF pages and writes corrected documents
"""

from setuptools import setup, find_packages
import sys
from pathlib import Path

# Read version from version file or default
VERSION = "1.0.0"
try:
    if Path("src/orientation_engine/version.py").exists():
        sys.path.insert(0, "src/orientation_engine")
        from version import VERSION
except ImportError:
    pass

# Read long description from README
try:
    with open("README.md", "r", encoding="utf-8") as fh:
        LONG_DESCRIPTION = fh.read()
except FileNotFoundError:
    LONG_DESCRIPTION = """
    PDF Orientation Engine

    Decides the correct rotation of every page of a PDF from its embedded text,
    OCR, text layout and, as a last resort, a manual prompt, then writes the
    corrected document with retry on busy output files.
    """

# Entry points for different installation methods
ENTRY_POINTS = {
    "console_scripts": [
        "orient-pdfs=orientation_engine.main:main",
    ],
}

setup(
    name="pdf-orientation-engine",
    version=VERSION,
    description="Page orientation detection and correction for PDF documents",
    long_description=LONG_DESCRIPTION,
    long_description_content_type="text/markdown",

    # Package configuration
    packages=find_packages(where="src"),
    package_dir={"": "src"},

    # Python version requirement
    python_requires=">=3.9",

    install_requires=[
        "PyMuPDF>=1.24.0",
        "pillow>=10.4.0",
        "pytesseract>=0.3.13",
        "psutil>=5.9.8",
    ],

    # Optional dependencies for development
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ],
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },

    entry_points=ENTRY_POINTS,

    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: End Users/Desktop",
        "Topic :: Office/Business",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Operating System :: Microsoft :: Windows",
        "Operating System :: MacOS :: MacOS X",
        "Operating System :: POSIX :: Linux",
        "Environment :: Console",
    ],

    keywords="pdf orientation rotation ocr tesseract scanned documents",

    zip_safe=False,
)
