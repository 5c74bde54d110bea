#!/usr/bin/env python3
"""The setup.py file."""

import os
import sys

from setuptools import find_packages, setup
from setuptools.command.install import install

with open("src/rainbird_ctl/version.py") as fh:
    for line in fh:
        if line.strip().startswith("__version__"):
            VERSION = line.split("=")[-1].strip().strip("\"'")
            break

with open("README.md") as fh:
    LONG_DESCRIPTION = fh.read()


def _requirements(file_name: str) -> list[str]:
    with open(file_name) as fh:
        return [r.strip() for r in fh if r.strip() and not r.startswith(("#", "-r"))]


class VerifyVersionCommand(install):
    """Custom command to verify that the git tag matches our VERSION."""

    def run(self):
        tag = os.getenv("CIRCLE_TAG")
        if tag != VERSION:
            info = f"Git tag: {tag} does not match the version of this pkg: {VERSION}"
            sys.exit(info)


setup(
    name="rainbird-ctl",
    description="A client for RainBird irrigation controllers (via a LNK WiFi module).",
    keywords=["rainbird", "irrigation", "sprinkler", "lnk", "esp-me", "esp-tm2"],
    install_requires=_requirements("requirements.txt"),
    extras_require={
        "test": _requirements("requirements_test.txt"),
        "dev": ["debugpy"],
    },
    long_description=LONG_DESCRIPTION,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages("src"),
    entry_points={
        "console_scripts": ["rainbird = rainbird_cli.client:main"],
    },
    version=VERSION,
    license="MIT",
    python_requires=">=3.11",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3.11",
        "Topic :: Home Automation",
    ],
    cmdclass={
        "verify": VerifyVersionCommand,
    },
)
