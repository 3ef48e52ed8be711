"""Grid layout: fits one image into every cell of a columns x rows grid.

Shared by the on-screen preview and the PDF exporter so what is shown is
exactly what is printed. All coordinates are page millimetres with the
origin at the top-left corner.
"""

from dataclasses import dataclass, field

from errors import InvalidGeometryError
from models import GridConfig


@dataclass
class CellPlacement:
    """One copy of the image: its cell origin and centred draw origin."""
    row: int
    column: int
    cell_x: float
    cell_y: float
    x: float
    y: float


@dataclass
class CutLine:
    """A separator between two cells."""
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def vertical(self) -> bool:
        return self.x1 == self.x2


@dataclass
class GridLayout:
    """Complete layout: cell size, draw size, placements and cut lines."""
    cell_width: float
    cell_height: float
    draw_width: float
    draw_height: float
    placements: list[CellPlacement] = field(default_factory=list)
    cut_lines: list[CutLine] = field(default_factory=list)

    @property
    def vertical_lines(self) -> list[CutLine]:
        return [ln for ln in self.cut_lines if ln.vertical]

    @property
    def horizontal_lines(self) -> list[CutLine]:
        return [ln for ln in self.cut_lines if not ln.vertical]


def fit_in_cell(cell_w: float, cell_h: float, img_w: float, img_h: float,
                scale_factor: float) -> tuple[float, float]:
    """Return the (width, height) of the image scaled to fit a cell.

    The image keeps its aspect ratio; the limiting cell dimension is
    filled to *scale_factor* of its length.
    """
    img_aspect = img_w / img_h
    cell_aspect = cell_w / cell_h
    if img_aspect > cell_aspect:
        # Image is relatively wider than the cell -- width limits
        w = cell_w * scale_factor
        h = w / img_aspect
    else:
        h = cell_h * scale_factor
        w = h * img_aspect
    return w, h


def cut_lines(config: GridConfig) -> list[CutLine]:
    """Internal column and row boundaries; never the outer edges."""
    m = config.margin
    cw, ch = config.cell_width, config.cell_height
    lines = []
    for col in range(1, config.columns):
        x = m + col * cw
        lines.append(CutLine(x, m, x, m + config.usable_height))
    for row in range(1, config.rows):
        y = m + row * ch
        lines.append(CutLine(m, y, m + config.usable_width, y))
    return lines


def compute_layout(config: GridConfig, image_width: int, image_height: int) -> GridLayout:
    """Lay out *config.total_cells* copies of an image of the given pixel size."""
    config.validate()
    if image_width <= 0 or image_height <= 0:
        raise InvalidGeometryError(
            f"Image has no area ({image_width}×{image_height} px)")

    cw, ch = config.cell_width, config.cell_height
    dw, dh = fit_in_cell(cw, ch, image_width, image_height, config.image_scale / 100)

    placements = []
    for row in range(config.rows):
        for col in range(config.columns):
            cx = config.margin + col * cw
            cy = config.margin + row * ch
            placements.append(CellPlacement(
                row=row, column=col, cell_x=cx, cell_y=cy,
                x=cx + (cw - dw) / 2, y=cy + (ch - dh) / 2,
            ))

    return GridLayout(cell_width=cw, cell_height=ch, draw_width=dw, draw_height=dh,
                      placements=placements, cut_lines=cut_lines(config))


def output_filename(config: GridConfig) -> str:
    return f"grid_{config.columns}x{config.rows}_{config.total_cells}pcs.pdf"
