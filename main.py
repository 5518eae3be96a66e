#!/usr/bin/env python3
"""
xlcompare - Main Entry Point

Usage:
  python main.py diff old.xlsx new.xlsx
  python main.py serve
"""

from xlcompare.cli.main import cli


if __name__ == '__main__':
    cli()
