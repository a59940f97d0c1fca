#!/usr/bin/env python3
"""Setup script for Snowfall"""

from setuptools import setup, find_packages

setup(
    name="snowfall-overlay",
    version="1.0.0",
    author="Snowfall Team",
    description="Layered snow particle overlay with batched rendering and a terminal demo",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Multimedia :: Graphics",
        "Environment :: Console :: Curses",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'snowfall-demo=snowfall.demo:main',
        ],
    },
)
