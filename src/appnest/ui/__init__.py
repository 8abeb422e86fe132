"""Terminal presentation helpers."""
