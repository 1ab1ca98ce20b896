"""Collection membership management for Fedora-style digital repositories."""

__version__ = "0.1.0"
