"""CRISPR design studio: experiment storage and aggregation."""
