"""TLC developer-platform toolkit."""

__version__ = "0.4.0"
