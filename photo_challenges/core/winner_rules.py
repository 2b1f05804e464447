"""Winner Rules — pure validation of an administrative winner selection.

Invariants:
    - First place is mandatory; second and third are optional
    - One entry may hold at most one place
    - Every supplied id must belong to the target challenge
"""

from photo_challenges.core.domain_types import WINNER_PLACES, EntryId, WinnerPlace
from photo_challenges.core.errors import (
    EntryNotInChallengeError,
    InvalidWinnerSelectionError,
)


def plan_placements(
    first: EntryId, second: EntryId | None = None, third: EntryId | None = None,
) -> dict[EntryId, WinnerPlace]:
    """Map entry id → place, rejecting an entry supplied for two places."""
    placements: dict[EntryId, WinnerPlace] = {}
    for place, entry_id in zip(WINNER_PLACES, (first, second, third)):
        if entry_id is None:
            continue
        if entry_id in placements:
            raise InvalidWinnerSelectionError(
                f"Entry {entry_id} cannot take both place "
                f"{placements[entry_id]} and place {place}.",
            )
        placements[entry_id] = WinnerPlace(place)
    return placements


def check_membership(
    placements: dict[EntryId, WinnerPlace], challenge_entry_ids: set[EntryId],
) -> None:
    """Raise EntryNotInChallengeError for ids outside the challenge."""
    foreign = [
        str(entry_id) for entry_id in placements
        if entry_id not in challenge_entry_ids
    ]
    if foreign:
        raise EntryNotInChallengeError(foreign)
