#!/usr/bin/env python3
"""
Round-Robin Tournament Scheduler
Entry point for the tournament scheduling system.
"""

import sys

if __name__ == "__main__":
    from round_robin.cli import main

    sys.exit(main())
