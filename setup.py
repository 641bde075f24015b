#!/usr/bin/env python3
import setuptools

setuptools.setup(
    name="go-sortimports",
    version="0.1.0",
    packages=["go_sortimports"],
    python_requires=">=3.11",
    install_requires=["click>=8.0"],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "sortimports = go_sortimports.cli:main",
        ],
    },
    author="",
    description="Command-line tool to group and sort the import blocks of Go source files",
    license="MIT",
)
