"""HTTP routes for Uptime Monitor."""
