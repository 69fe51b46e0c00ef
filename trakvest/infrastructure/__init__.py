"""
Infrastructure layer package.

Contains concrete implementations (adapters) of the ports
defined in the domain layer. This is where the database,
market-data APIs, mail delivery and crypto libraries live.
"""
