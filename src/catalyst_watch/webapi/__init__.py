"""HTTP API for Catalyst Watch."""
