"""Command line interface for ninjanet."""
