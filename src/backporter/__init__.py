"""Backporter - carry upstream V8 commits into a vendored deps/v8."""

__version__ = "0.1.0"
