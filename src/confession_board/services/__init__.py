"""Service layer for the Confession Board application."""
