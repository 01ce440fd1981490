#!/usr/bin/env python
"""
The setup script for cronsync
"""

import os
import re

from setuptools import find_packages, setup

SETUP_DIRNAME = os.path.abspath(os.path.dirname(__file__))

CRONSYNC_INIT = os.path.join(SETUP_DIRNAME, "cronsync", "__init__.py")
CRONSYNC_BASE_REQUIREMENTS = os.path.join(SETUP_DIRNAME, "requirements", "base.txt")
CRONSYNC_TEST_REQUIREMENTS = os.path.join(SETUP_DIRNAME, "requirements", "pytest.txt")


# ----- Helper Functions -------------------------------------------------------------------------------------------->


def _parse_requirements_file(requirements_file):
    parsed_requirements = []
    with open(requirements_file, encoding="utf-8") as rfh:
        for line in rfh.readlines():
            line = line.strip()
            if not line or line.startswith(("#", "-r", "--")):
                continue
            parsed_requirements.append(line)
    return parsed_requirements


def _read_version():
    with open(CRONSYNC_INIT, encoding="utf-8") as rfh:
        match = re.search(r'^__version__ = "([^"]+)"', rfh.read(), re.M)
    return match.group(1)


# <---- Helper Functions ---------------------------------------------------------------------------------------------


setup(
    name="cronsync",
    version=_read_version(),
    description="Converge users' crontabs to a declared set of cron jobs",
    python_requires=">=3.7",
    classifiers=[
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: POSIX",
        "Topic :: System :: Systems Administration",
    ],
    license="Apache Software License 2.0",
    packages=find_packages(include=["cronsync", "cronsync.*"]),
    install_requires=_parse_requirements_file(CRONSYNC_BASE_REQUIREMENTS),
    extras_require={"tests": _parse_requirements_file(CRONSYNC_TEST_REQUIREMENTS)},
    zip_safe=False,
)
