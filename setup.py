"""
Setup script for PDF Editor Core.

This script configures the package for installation via pip.
Supports both development and production installations.
"""

from setuptools import setup, find_packages

setup(
    name="pdf-editor-core",
    version="1.0.0",
    description="Page-level PDF editing core: rotate, crop, annotate, reorder, split and merge with a synchronised page model",
    long_description=(
        "A document mutation and page-indexing core for PDF editing tools, "
        "with an async editing session and a command-line shell."
    ),
    author="PDF Editor Core Contributors",
    author_email="",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pypdf>=4.0.0",
        "pypdfium2>=4.0.0",
        "Pillow>=10.0.0",
        "click>=8.0.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pdf-editor=pdf_editor.cli:cli",
        ],
    },
    python_requires=">=3.10",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Office/Business",
        "Topic :: Utilities",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Operating System :: OS Independent",
        "Environment :: Console",
    ],
    keywords="pdf editor rotate crop annotate reorder split merge extract thumbnails",
    license="MIT",
    include_package_data=True,
    zip_safe=False,
)
