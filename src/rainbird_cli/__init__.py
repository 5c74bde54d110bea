#!/usr/bin/env python3
"""A CLI for the rainbird_ctl library."""
