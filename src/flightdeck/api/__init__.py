"""HTTP API for the site backend."""
