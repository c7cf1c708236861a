"""Business logic services.

Services contain the offer sync pipeline: identifier extraction, Mobgran
fetching, locking, persistence primitives and read-side queries.
"""
