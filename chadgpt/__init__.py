"""ChadGPT - IRC bot backed by Claude completions."""

__version__ = "0.3.0"
