"""SimpliShare business-offers API."""

__version__ = "1.0.0"
