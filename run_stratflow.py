#!/usr/bin/env python3
"""
Stratified Pipe Flow: quick launcher.

Usage:
    python run_stratflow.py [options]

Run ``python run_stratflow.py --help`` for full options.
"""

from stratflow.app import main

if __name__ == "__main__":
    main()
