"""Core install machinery: assets, sources, journal, pipeline."""
