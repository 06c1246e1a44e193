"""Content resolution, search and related-item scoring for a front-matter content tree."""

__version__ = "0.1.0"
