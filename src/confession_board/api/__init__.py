"""HTTP API for the Confession Board."""
