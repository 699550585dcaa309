"""Lead capture backend for the catering site contact and request forms."""

__version__ = "1.0.0"
