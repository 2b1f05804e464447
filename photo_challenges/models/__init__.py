"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Challenge is the aggregate root; entries and votes cascade from it

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from photo_challenges.models.challenge import Challenge  # noqa: F401
from photo_challenges.models.entry import Entry  # noqa: F401
from photo_challenges.models.vote import Vote  # noqa: F401
