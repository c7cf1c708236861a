"""Data stores for persistence and locking.

Stores handle:
- PostgreSQL: DB session, transactions, ORM base
- Redis: distributed locks

No business/sync logic in stores - that belongs in services.
"""
