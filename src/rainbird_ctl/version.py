#!/usr/bin/env python3
"""RainBird - the version of the package."""

__version__ = "0.3.2"
VERSION = __version__
