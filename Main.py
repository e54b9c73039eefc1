#!/usr/bin/env python3
"""

Usage:
    python Main.py [--url ws://localhost:8080/ws/clock] [--sample-size 11]

Or
    python -m netclock [--url ws://localhost:8080/ws/clock] [--sample-size 11]
"""

from netclock.__main__ import main

if __name__ == "__main__":
    main()
