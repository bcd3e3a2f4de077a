"""Era rule tables: consumption matrix, ability geometry and cooldowns."""

from .types import CellContent, Era, Position, Role

# Which roles may step onto a cell holding the given content
ENTERABLE_BY: dict[CellContent, frozenset[Role]] = {
    CellContent.EMPTY: frozenset(Role),
    CellContent.FOOD: frozenset({Role.PREY}),
    CellContent.PREY: frozenset({Role.PREDATOR, Role.APEX}),
    CellContent.PREDATOR: frozenset({Role.APEX}),
    CellContent.APEX: frozenset(),
}

# Cooldown (in rounds) applied after an ability move
ABILITY_COOLDOWNS: dict[Era, dict[Role, int]] = {
    Era.PAST: {Role.APEX: 2, Role.PREDATOR: 2, Role.PREY: 2},
    Era.PRESENT: {Role.APEX: 3, Role.PREDATOR: 0, Role.PREY: 3},
    Era.FUTURE: {Role.APEX: 3, Role.PREDATOR: 2, Role.PREY: 2},
}

# Points awarded to the eater and taken from the eaten
FOOD_POINTS = 3
PREDATOR_CATCH_POINTS = 3
APEX_CATCH_POINTS = 1
EATEN_PENALTY = 1


def can_enter(mover: Role, target: CellContent) -> bool:
    """Check the consumption matrix for a mover entering a cell."""
    return mover in ENTERABLE_BY[target]


def ability_cooldown(era: Era, role: Role) -> int:
    return ABILITY_COOLDOWNS[era][role]


def ability_geometry_ok(
    era: Era, role: Role, from_pos: Position, to_pos: Position, apex_pos: Position
) -> bool:
    """
    Check the era/role geometry table for a distance >= 2 move.

    apex_pos is only consulted for the Present-era Predator, whose ability
    needs it to stand next to the Apex.
    """
    dr = abs(to_pos.row - from_pos.row)
    dc = abs(to_pos.col - from_pos.col)
    d = max(dr, dc)
    straight = dr == 0 or dc == 0

    if era == Era.PAST:
        if role == Role.APEX:
            return d == 2 and (straight or (dr == 2 and dc == 2))
        if role == Role.PREDATOR:
            return d == 2 and straight
        return d == 2

    if era == Era.PRESENT:
        if role == Role.APEX:
            return 2 <= d <= 3
        if role == Role.PREDATOR:
            return d == 2 and straight and from_pos.is_adjacent(apex_pos)
        return d == 2

    if era == Era.FUTURE:
        if role == Role.APEX:
            return 2 <= d <= 3
        if role == Role.PREDATOR:
            return d == 2 and (straight or dr == dc)
        return d == 3

    return False
