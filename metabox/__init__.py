"""
Metabox panels: tabbed admin settings panels with sanitized per-field persistence.
"""

__version__ = "1.0.0"
