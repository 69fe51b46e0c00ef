"""Infrastructure adapters for the portfolio bounded context."""
