#!/usr/bin/env python3
"""RainBird - a client for the RainBird LNK/SIP irrigation protocol."""

__version__ = "0.3.2"
VERSION = __version__
