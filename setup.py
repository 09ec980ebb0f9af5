#!/usr/bin/env python3
"""
Packaging for Fibre Monitor.

Allows standard pip editable installs (pip install -e .).
"""

from setuptools import setup, find_packages

setup(
    name="fibre-monitor",
    version="0.1.0",
    description="Distributed optical fibre sensing data model: traces, profile, heat map grid and synchronized axes",
    license="MIT",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.6.0",
        "pydantic>=2.5.0",
        "rich>=13.7.0",
        "numpy>=1.26.0",
    ],
    extras_require={
        "test": ["pytest>=7.4.0"],
    },
    entry_points={
        "console_scripts": [
            "fibre-monitor=fibre_monitor.main:main",
        ],
    },
)
