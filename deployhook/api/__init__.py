"""HTTP API for deployhook."""
