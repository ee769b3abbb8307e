from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from duel_core.errors import MapFormatError
from duel_core.world_model import ArenaMap

# '#' wall, 'c' low cover, '.' floor, 'H' hiding spot, 'F' FSM spawn, 'Z' fuzzy spawn
DEFAULT_LAYOUT: List[str] = [
    "########################",
    "#F.....................#",
    "#......H.......H.......#",
    "#...####.....####......#",
    "#...#..........c#......#",
    "#...#...c.......#..H...#",
    "#.H.#...........#......#",
    "#...........##.........#",
    "#.......H...##......H..#",
    "#......#..........#....#",
    "#..c...#....cc....#....#",
    "#......#..H.......#....#",
    "#......####....####....#",
    "#..H................c..#",
    "#.....................Z#",
    "########################",
]

REQUIRED_SPAWNS = ("F", "Z")


def default_arena(grid_size: float = 1.0) -> ArenaMap:
    return validate_arena(ArenaMap.from_rows(DEFAULT_LAYOUT, grid_size=grid_size))


def load_arena(path: Optional[str | Path], grid_size: float = 1.0) -> ArenaMap:
    """Load a ``.csv`` layout (one symbol per cell) or a plain-text one (one row per line)."""
    if path is None:
        return default_arena(grid_size)
    path = Path(path)
    if path.suffix.lower() == ".csv":
        arena = ArenaMap.from_csv(path, grid_size=grid_size)
    else:
        rows = [line.rstrip("\n") for line in path.read_text(encoding="utf-8").splitlines()]
        arena = ArenaMap.from_rows([row for row in rows if row.strip()], grid_size=grid_size)
    return validate_arena(arena)


def validate_arena(arena: ArenaMap) -> ArenaMap:
    missing = [mark for mark in REQUIRED_SPAWNS if mark not in arena.spawns]
    if missing:
        raise MapFormatError(f"layout is missing spawn marker(s): {', '.join(missing)}")
    return arena
