#!/usr/bin/env python3
"""
WDBC Training Script
====================

Runs the classification pipeline from a YAML configuration:

    python scripts/train.py configs/wdbc.yaml --debug

"""
import sys

from wdbc.cli import main


if __name__ == "__main__":
    sys.exit(main())
