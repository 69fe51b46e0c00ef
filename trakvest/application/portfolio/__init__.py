"""Use cases for the portfolio bounded context."""
