#!/usr/bin/env python3
"""Setup script for decksheet-tools package."""

from setuptools import setup, find_packages

setup(
    name="decksheet-tools",
    version="0.1.0",
    description="Trading-card deck sheets with embedded, re-scannable QR codes",
    author="Decksheet Project",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "click>=8.0.0",
        "Pillow>=10.1.0",
        "PyYAML>=6.0",
        "requests>=2.28.0",
        "python-dotenv>=1.0.0",
        "qrcode>=7.4",
        "opencv-python-headless>=4.8.0",
        "numpy>=1.24",
    ],
    extras_require={
        "dev": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "decksheet=decksheet.cli:cli",
        ],
    },
    python_requires=">=3.10",
)
