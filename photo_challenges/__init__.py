"""Photo Challenges — time-boxed photo contest lifecycle and voting engine.

Invariants:
    - Phases move UPCOMING → ACTIVE → VOTING → COMPLETED, driven by time, never backwards
    - One entry per participant per challenge; at most one vote per (entry, voter)
"""
