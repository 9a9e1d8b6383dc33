"""scriptparser: tool-call adapter and storage service for script analysis."""

__version__ = "0.1.0"
