"""
Domain layer package.

Pure business logic: entities, domain services, ports and errors.
No framework imports and no direct IO.
"""
