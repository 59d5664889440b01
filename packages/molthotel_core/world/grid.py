"""Grid geometry for the hotel floor: bounds, furniture, spawning and facing."""

from __future__ import annotations

import random
from typing import Iterable

ROOM_W = 40
ROOM_H = 32
SPAWN_MARGIN = 2

# Direction encoding shared with the rendering client (y grows southward).
WEST = 0
NORTH_WEST = 1
NORTH = 2
NORTH_EAST = 3
EAST = 4
SOUTH_EAST = 5
SOUTH = 6
SOUTH_WEST = 7

_DIRECTION_BY_SIGN: dict[tuple[int, int], int] = {
    (1, 0): EAST,
    (-1, 0): WEST,
    (0, 1): SOUTH,
    (0, -1): NORTH,
    (1, 1): SOUTH_EAST,
    (1, -1): NORTH_EAST,
    (-1, 1): SOUTH_WEST,
    (-1, -1): NORTH_WEST,
}


def _furniture_block(xs: Iterable[int], ys: Iterable[int]) -> set[tuple[int, int]]:
    ys = list(ys)
    return {(x, y) for x in xs for y in ys}


# Furniture footprints; the frontend renders the same set.
BLOCKED_TILES: frozenset[tuple[int, int]] = frozenset(
    _furniture_block(range(6, 10), range(2, 4))
    | _furniture_block(range(30, 33), range(2, 4))
    | _furniture_block(range(24, 29), range(3, 5))
    | _furniture_block(range(2, 6), range(20, 22))
)


def sign(value: int) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def in_bounds(x: int, y: int) -> bool:
    return 0 <= x < ROOM_W and 0 <= y < ROOM_H


def is_walkable(x: int, y: int) -> bool:
    return in_bounds(x, y) and (x, y) not in BLOCKED_TILES


def manhattan(ax: int, ay: int, bx: int, by: int) -> int:
    return abs(ax - bx) + abs(ay - by)


def spawn_candidates() -> list[tuple[int, int]]:
    return [
        (x, y)
        for x in range(SPAWN_MARGIN, ROOM_W - SPAWN_MARGIN)
        for y in range(SPAWN_MARGIN, ROOM_H - SPAWN_MARGIN)
        if (x, y) not in BLOCKED_TILES
    ]


_SPAWN_TILES = spawn_candidates()


def random_spawn(rng: random.Random) -> tuple[int, int]:
    """Pick a free tile inside the spawn margin, uniformly at random."""
    if not _SPAWN_TILES:
        raise RuntimeError("No free spawn tile on the hotel grid; check BLOCKED_TILES and room size")
    return rng.choice(_SPAWN_TILES)


def direction_for_delta(dx: int, dy: int, current: int) -> int:
    """Direction from the sign of a displacement; a zero move keeps `current`."""
    return _DIRECTION_BY_SIGN.get((sign(dx), sign(dy)), current)


def facing_toward(dx: int, dy: int, current: int) -> int:
    """Face a target by axis dominance, preferring east/west on ties."""
    if dx == 0 and dy == 0:
        return current
    if abs(dx) >= abs(dy):
        return EAST if dx > 0 else WEST
    return SOUTH if dy > 0 else NORTH


def facing_x_first(dx: int, dy: int, current: int) -> int:
    if dx > 0:
        return EAST
    if dx < 0:
        return WEST
    if dy > 0:
        return SOUTH
    if dy < 0:
        return NORTH
    return current


def step_toward(x: int, y: int, tx: int, ty: int, steps: int) -> tuple[int, int]:
    """Walk up to `steps` diagonal-capable steps toward (tx, ty).

    A step that would land out of bounds or on furniture is skipped and the
    walker stays put for that step.
    """
    for _ in range(max(0, steps)):
        nx = x + sign(tx - x)
        ny = y + sign(ty - y)
        if is_walkable(nx, ny):
            x, y = nx, ny
    return x, y
