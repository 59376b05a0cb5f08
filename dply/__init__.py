"""dply: release creation and deployment monitoring CLI."""

__version__ = "0.3.0"
