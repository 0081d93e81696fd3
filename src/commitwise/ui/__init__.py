"""Command-line surface: argument routing and terminal rendering."""
