from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from config import BOARD_SIZE

Cell = Tuple[int, int]


class CellState(IntEnum):
    BLOCKED = -1
    USABLE = 0
    POWER = 1


class PartType(Enum):
    """Slot roles a ship exposes; value is (catalog label, ship slot key)."""

    JUMP_DRIVE = ("Jump Drives", "jumpDrive")
    SENSOR = ("Sensors", "sensor")
    ENGINE = ("Engines", "engine")
    PILOT_CANNON = ("Pilot Cannon", "pilotCannon")
    MULTI_TURRET = ("Multi Turret Systems", "multiTurretSystem")
    SPECIAL_WEAPON = ("Special Weapons", "specialWeapon")

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def ship_key(self) -> str:
        return self.value[1]

    @classmethod
    def from_label(cls, label: str) -> Optional["PartType"]:
        for member in cls:
            if member.label == label or member.name == label:
                return member
        return None

    @classmethod
    def from_ship_key(cls, key: str) -> Optional["PartType"]:
        for member in cls:
            if member.ship_key == key:
                return member
        return None


def shape_from_pattern(rows: Iterable[str], mark: str = "X") -> Tuple[Cell, ...]:
    return tuple(
        (x, y)
        for y, row in enumerate(rows)
        for x, ch in enumerate(row)
        if ch == mark
    )


@dataclass(frozen=True)
class Part:
    id: str
    name: str
    type: PartType
    shape: Tuple[Cell, ...]
    base_id: str = ""
    tier: Optional[int] = None

    def __post_init__(self):
        if not self.base_id:
            object.__setattr__(self, "base_id", self.id)

    @classmethod
    def from_pattern(cls, id: str, name: str, type: PartType, rows: Sequence[str], **kw) -> "Part":
        return cls(id=id, name=name, type=type, shape=shape_from_pattern(rows), **kw)


@dataclass(frozen=True)
class EquipmentShape:
    id: str
    name: str
    kind: str          # "reactor" | "auxiliary"
    tier: int
    pattern: Tuple[str, ...]
    base_id: str = ""

    def __post_init__(self):
        if not self.base_id:
            object.__setattr__(self, "base_id", self.id)


@dataclass(frozen=True)
class ShipConfiguration:
    ship_id: str
    name: str
    tier: int
    slots: Mapping[PartType, int] = field(default_factory=dict)

    def slot_count(self, part_type: PartType) -> int:
        return int(self.slots.get(part_type, 0))


class SlotKey(NamedTuple):
    part_type: PartType
    idx: int

    def __str__(self) -> str:
        return f"{self.part_type.label}_{self.idx}"


@dataclass(frozen=True)
class Placeable:
    part: Part
    idx: int

    @property
    def key(self) -> Tuple[str, int]:
        return (self.part.id, self.idx)

    @property
    def slot(self) -> SlotKey:
        return SlotKey(self.part.type, self.idx)

    @property
    def shape(self) -> Tuple[Cell, ...]:
        return self.part.shape


@dataclass
class PlacedPart:
    slot: SlotKey
    part_id: str
    name: str
    cells: Tuple[Cell, ...]

    @property
    def id(self) -> SlotKey:
        return self.slot


@dataclass(frozen=True)
class Placement:
    placeable: Placeable
    origin: Cell
    rotation: int
    cells: Tuple[Cell, ...]

    @property
    def part(self) -> Part:
        return self.placeable.part


@dataclass(frozen=True)
class Board:
    """Immutable 8x8 mask; ``grid[y][x]`` holds a :class:`CellState`."""

    grid: Tuple[Tuple[CellState, ...], ...]

    @classmethod
    def blocked(cls) -> "Board":
        row = tuple(CellState.BLOCKED for _ in range(BOARD_SIZE))
        return cls(tuple(row for _ in range(BOARD_SIZE)))

    @classmethod
    def usable(cls) -> "Board":
        row = tuple(CellState.USABLE for _ in range(BOARD_SIZE))
        return cls(tuple(row for _ in range(BOARD_SIZE)))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "Board":
        if len(rows) != BOARD_SIZE or any(len(r) != BOARD_SIZE for r in rows):
            raise ValueError(f"board must be {BOARD_SIZE}x{BOARD_SIZE}")
        return cls(tuple(tuple(CellState(int(v)) for v in r) for r in rows))

    @classmethod
    def with_usable_cells(cls, cells: Iterable[Cell]) -> "Board":
        rows = [[CellState.BLOCKED] * BOARD_SIZE for _ in range(BOARD_SIZE)]
        for x, y in cells:
            rows[y][x] = CellState.USABLE
        return cls.from_rows(rows)

    @staticmethod
    def in_bounds(x: int, y: int) -> bool:
        return 0 <= x < BOARD_SIZE and 0 <= y < BOARD_SIZE

    def state(self, x: int, y: int) -> CellState:
        return self.grid[y][x]

    def usable_cells(self) -> List[Cell]:
        return [
            (x, y)
            for y in range(BOARD_SIZE)
            for x in range(BOARD_SIZE)
            if self.grid[y][x] != CellState.BLOCKED
        ]

    def rows(self) -> List[List[int]]:
        return [[int(v) for v in row] for row in self.grid]


def slot_counts(raw: Mapping[str, object]) -> Dict[PartType, int]:
    out: Dict[PartType, int] = {}
    for key, value in raw.items():
        part_type = PartType.from_ship_key(str(key))
        if part_type is None:
            continue
        try:
            out[part_type] = max(0, int(value))
        except (TypeError, ValueError):
            continue
    return out
