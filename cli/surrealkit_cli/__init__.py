"""Command-line front end for SurrealKit."""
