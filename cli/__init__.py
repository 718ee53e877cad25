"""Command-line application for url_expander."""
