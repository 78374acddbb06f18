"""QuickDesk help-desk ticketing server."""

__version__ = "1.0.0"
