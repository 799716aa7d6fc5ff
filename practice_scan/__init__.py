"""Rule-based project compliance scanner."""

__version__ = "0.1.0"
