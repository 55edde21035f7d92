"""rum-symbols: prepare and upload symbolication artifacts."""

__version__ = "0.1.0"
