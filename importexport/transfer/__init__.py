"""Export package layout helpers."""
