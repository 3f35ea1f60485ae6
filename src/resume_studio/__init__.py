"""Résumé builder: content model, template rendering, AI template import and export."""

__version__ = "0.3.0"
