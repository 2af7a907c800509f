#!/usr/bin/env python
import codecs
import os.path
import re

from setuptools import find_packages, setup

here = os.path.abspath(os.path.dirname(__file__))


def read(*parts):
    return codecs.open(os.path.join(here, *parts), "r", encoding="utf-8").read()


def find_version(*file_paths):
    version_file = read(*file_paths)
    version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]", version_file, re.M)
    if version_match:
        return version_match.group(1)
    raise RuntimeError("Unable to find version string.")


requires = []

setup(
    name="light-request",
    version=find_version("light_request", "__init__.py"),
    description="In-memory inbound HTTP requests for testing server-side handlers",
    long_description=read("README.md"),
    long_description_content_type="text/markdown",
    author="Amazon Web Services",
    keywords="python testing http mock request stream",
    scripts=[],
    packages=find_packages(include=["light_request", "light_request.*"]),
    include_package_data=True,
    install_requires=requires,
    extras_require={
        "aiohttp": ["aiohttp>=3.9"],
        "tests": ["pytest>=7.0", "pytest-asyncio>=0.21", "aiohttp>=3.9"],
    },
    python_requires=">=3.12",
    license="Apache License 2.0",
    classifiers=[
        "Development Status :: 2 - Pre-Alpha",
        "Intended Audience :: Developers",
        "Natural Language :: English",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: Implementation :: CPython",
        "Topic :: Software Development :: Testing",
    ],
)
