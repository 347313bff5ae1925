#!/usr/bin/env python3
"""
ALEX command line client
========================
Thin entry-point. All logic lives in alex_cli.runner.cli.

Usage:
    python3 run_alex.py --uri http://localhost:8000 --targets http://localhost:8080 \
        -a test -u admin@alex.example:admin -s symbols.json -t tests.json -c config.json
"""

from alex_cli.runner.cli import main

if __name__ == "__main__":
    main()
