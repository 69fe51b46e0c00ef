"""
Trakvest: personal investment-portfolio tracker.

Application package root. This is a modular monolith using
hexagonal architecture (ports & adapters) with domain-driven design.

Bounded contexts:
    - portfolio: accounts, cash ledger, holdings, instruments, goals, admin.

Layers:
    - domain: Pure business logic, entities, ports (ABCs), errors.
    - application: Use cases, DTOs, orchestration.
    - infrastructure: Adapters (DB, market data, mail, crypto) implementing domain ports.
    - interfaces: FastAPI routers, Pydantic schemas.
    - realtime: Price push channel and the background refresh loop.
    - shared: Cross-cutting concerns (errors, security, logging, locks).
"""
