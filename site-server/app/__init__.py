"""DIDC website backend: contact form API."""

__version__ = "1.0.0"
