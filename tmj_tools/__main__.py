#!/usr/bin/env python3

"""
Tiled JSON map tools

Usage:
    python -m tmj_tools rotate [--cw | --ccw] [--turns N] [map.json ...]
    python -m tmj_tools variants [--count N] [map.json ...]
    python -m tmj_tools check [map.json ...]
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
