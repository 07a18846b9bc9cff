"""Command line entry points for Metaimage."""
