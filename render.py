
import random
from html import escape
from typing import Dict, Iterable, Tuple

from config import CFG, BOARD_SIZE
from models import Board, CellState, PlacedPart

_STATE_FILL = {
    CellState.BLOCKED: "#2b2b2b",
    CellState.USABLE: "#d9e4ec",
    CellState.POWER: "#f3d27a",
}


def _color(name: str) -> str:
    rng = random.Random(name)
    r = rng.randint(40, 200)
    g = rng.randint(40, 200)
    b = rng.randint(40, 200)
    return f"rgb({r},{g},{b})"


def board_svg(board: Board, placed: Iterable[PlacedPart]) -> Tuple[str, str]:
    """Return (svg, legend_html) for the board mask with placed parts on top."""
    scale = int(getattr(CFG, "BOARD_SVG_SCALE", 48) or 48)
    size = BOARD_SIZE * scale + 2
    palette: Dict[str, str] = {}

    cells = []
    for y in range(BOARD_SIZE):
        for x in range(BOARD_SIZE):
            fill = _STATE_FILL[board.state(x, y)]
            cells.append(
                f'<rect x="{x*scale+1}" y="{y*scale+1}" width="{scale}" height="{scale}" '
                f'fill="{fill}" stroke="#888" stroke-width="1"/>'
            )

    parts = []
    for p in placed:
        fill = palette.setdefault(p.name, _color(p.part_id))
        for x, y in p.cells:
            parts.append(
                f'<rect class="part" data-slot="{p.slot}" x="{x*scale+3}" y="{y*scale+3}" '
                f'width="{scale-4}" height="{scale-4}" fill="{fill}" stroke="black" stroke-width="1"/>'
            )
        if p.cells:
            lx, ly = min(p.cells, key=lambda c: (c[1], c[0]))
            parts.append(
                f'<text x="{lx*scale+6}" y="{ly*scale+16}" font-size="11" fill="black">{escape(p.name)}</text>'
            )

    frame = f'<rect x="1" y="1" width="{size-2}" height="{size-2}" fill="none" stroke="black" stroke-width="2"/>'
    svg = (
        f'<svg class="board-svg" xmlns="http://www.w3.org/2000/svg" '
        f'width="{size}" height="{size}" viewBox="0 0 {size} {size}">'
        f'{"".join(cells)}{"".join(parts)}{frame}</svg>'
    )
    legend = "".join(f"<li><span class='swatch' style='background:{c}'></span>{escape(n)}</li>" for n, c in palette.items())
    return svg, legend
