"""Command groups of the benefits2ofx CLI."""
