"""addonstore - pluggable content store for addon-registered content types."""

__version__ = "0.1.0"
