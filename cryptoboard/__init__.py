"""Terminal crypto price tracker with hover previews."""

__version__ = "0.1.0"
