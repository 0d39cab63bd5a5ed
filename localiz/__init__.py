"""Localiz - Local deals and swap/donate marketplace backend."""

__version__ = "0.1.0"
