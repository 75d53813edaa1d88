"""Lumia library: world-book ingestion and selection-to-text macro resolution."""
