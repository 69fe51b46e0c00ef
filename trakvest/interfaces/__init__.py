"""
Interface layer package.

FastAPI routers, request/response schemas and dependency wiring.
No business logic belongs here.
"""
