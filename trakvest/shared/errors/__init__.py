"""Error-to-HTTP mapping."""
