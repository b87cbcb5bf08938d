"""HTTP API for the permit classifier."""
