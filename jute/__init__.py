"""JUTE: create JSON key-value pairs in your terminal."""

__version__ = "0.1.0"
