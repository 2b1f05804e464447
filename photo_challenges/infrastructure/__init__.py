"""Infrastructure Layer — database session management, clock, logging, background runners.

Invariants:
    - Infrastructure never holds domain rules; it wires IO around core/ and services/
"""
