"""ChronoPilot monthly report workflows."""

__version__ = "0.1.0"
