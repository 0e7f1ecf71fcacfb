"""HTTP API routers for Uptime Monitor."""
