"""SQLAlchemy ORM models.

Models represent database tables:
- offers: One row per canonical identifier, with the raw upstream document
- cavaletes: Slab groups of the latest import of an offer
- items: Individual slabs of a cavalete
"""

from mobgran_sync.models.offer import Offer
from mobgran_sync.models.cavalete import Cavalete
from mobgran_sync.models.item import Item

__all__ = ["Offer", "Cavalete", "Item"]
