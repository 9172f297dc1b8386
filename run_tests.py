#!/usr/bin/env python3
"""
Test runner script for Uptime Monitor.

Usage:
    python run_tests.py           # All tests with coverage
    python run_tests.py --quick   # Unit tests only, no coverage
"""

import sys
import subprocess


def main():
    if "--quick" in sys.argv[1:]:
        cmd = ["pytest", "-m", "unit", "-q"]
    else:
        cmd = ["pytest", "--cov=uptime_monitor", "--cov-report=term-missing", "-q"]

    print(f"Executing: {' '.join(cmd)}")
    return subprocess.run(cmd).returncode


if __name__ == "__main__":
    sys.exit(main())
