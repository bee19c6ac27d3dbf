#!/usr/bin/env python3
"""Backporter - backport upstream V8 commits into Node.js deps/v8."""

from backporter.cli import main

if __name__ == "__main__":
    main()
