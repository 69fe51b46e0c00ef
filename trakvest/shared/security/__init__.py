"""HTTP security: headers and rate limiting."""
