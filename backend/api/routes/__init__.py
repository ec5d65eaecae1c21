"""HTTP routes owned by the api package."""
