"""Front matter parsing and placement-to-URL helpers."""
