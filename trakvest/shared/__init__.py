"""
Shared module package.

Contains cross-cutting concerns used across the application:
- Error handling and mapping
- Security middleware
- Rate limiting
- Logging configuration
- Per-user mutation locks
"""
