#!/usr/bin/env python3
"""
Assume Setup CLI entry point
"""

from assume_setup.cli import cli

if __name__ == "__main__":
    cli()
