"""Content tree loading, normalization and section splitting."""
