"""Vitalis: access-controlled management of clinical observation records."""

__version__ = "0.1.0"
