"""Data model classes and constants for Grid Sheet Maker.

All layout math happens in millimetres; the PDF exporter converts to
device pixels at export time.
"""

import re
from dataclasses import dataclass, field

from errors import InvalidGeometryError


# === Constants ===
DPI = 300              # export resolution
MM_PER_INCH = 25.4

SCALE_MIN = 10         # image_scale bounds, percent of cell
SCALE_MAX = 100

# Accepted (min, max) per numeric option; the form controls use the same limits
OPTION_RANGES = {
    "page_width": (1, 5000),
    "page_height": (1, 5000),
    "columns": (1, 100),
    "rows": (1, 100),
    "margin": (0, 500),
    "image_scale": (SCALE_MIN, SCALE_MAX),
}

CUSTOM = "custom"

# Cut lines: thin light-gray dashes, 2mm on / 2mm off
CUT_LINE_WIDTH_MM = 0.2
CUT_LINE_DASH_MM = (2.0, 2.0)
CUT_LINE_COLOR = (150, 150, 150)


@dataclass(frozen=True)
class PageSize:
    """A named page-size preset, in millimetres."""
    key: str
    name: str
    width: int
    height: int

    @property
    def label(self) -> str:
        if self.key == CUSTOM:
            return self.name
        return f"{self.name} ({self.width}×{self.height}mm)"


# Ordered as shown in the page-size combo
PAGE_SIZES = {
    "a4": PageSize("a4", "A4", 210, 297),
    "letter": PageSize("letter", "Letter", 216, 279),
    "legal": PageSize("legal", "Legal", 216, 356),
    "a5": PageSize("a5", "A5", 148, 210),
    "a3": PageSize("a3", "A3", 297, 420),
    CUSTOM: PageSize(CUSTOM, "Custom", 210, 297),
}


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_int(value) -> int | None:
    """Parse *value* the way a form field would: leading integer or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value)
    if isinstance(value, str):
        m = _LEADING_INT.match(value)
        return int(m.group(1)) if m else None
    return None


# === Data Model ===

@dataclass
class GridConfig:
    """Grid and page settings. Lengths in mm, image_scale in percent."""
    columns: int = 4
    rows: int = 5
    margin: int = 10
    image_scale: int = 95
    page_size: str = "a4"
    page_width: int = 210
    page_height: int = 297

    def set_option(self, key: str, value) -> bool:
        """Apply one form edit. Returns True if the config changed.

        Bad numbers are ignored rather than raised: the previous value
        stays. Selecting a preset overwrites the page dimensions, and
        editing a dimension by hand switches the page size to custom.
        """
        if key == "page_size":
            if value not in PAGE_SIZES:
                raise ValueError(f"Unknown page size: {value!r}")
            preset = PAGE_SIZES[value]
            old = (self.page_size, self.page_width, self.page_height)
            self.page_size = value
            self.page_width = preset.width
            self.page_height = preset.height
            return old != (self.page_size, self.page_width, self.page_height)

        if key not in OPTION_RANGES:
            raise KeyError(key)

        num = parse_int(value)
        if num is None or num < 0:
            return False
        lo, hi = OPTION_RANGES[key]
        if key == "image_scale":
            num = max(lo, min(num, hi))
        elif not lo <= num <= hi:
            return False

        if key in ("page_width", "page_height"):
            changed = getattr(self, key) != num or self.page_size != CUSTOM
            setattr(self, key, num)
            self.page_size = CUSTOM
            return changed

        changed = getattr(self, key) != num
        setattr(self, key, num)
        return changed

    @property
    def page(self) -> PageSize:
        return PAGE_SIZES.get(self.page_size, PAGE_SIZES[CUSTOM])

    @property
    def total_cells(self) -> int:
        return self.columns * self.rows

    @property
    def usable_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def usable_height(self) -> float:
        return self.page_height - 2 * self.margin

    @property
    def cell_width(self) -> float:
        return self.usable_width / self.columns

    @property
    def cell_height(self) -> float:
        return self.usable_height / self.rows

    @property
    def is_portrait(self) -> bool:
        return self.page_height > self.page_width

    def validate(self):
        """Raise InvalidGeometryError if the grid cannot be laid out."""
        if self.columns < 1 or self.rows < 1:
            raise InvalidGeometryError(
                f"Grid needs at least one column and one row "
                f"(got {self.columns}×{self.rows})")
        if self.usable_width <= 0 or self.usable_height <= 0:
            raise InvalidGeometryError(
                f"Margin of {self.margin}mm leaves no room on a "
                f"{self.page_width}×{self.page_height}mm page")


@dataclass
class LoadedImage:
    """The single uploaded image, kept as its original encoded bytes."""
    name: str
    data: bytes
    pixel_width: int
    pixel_height: int
    format: str | None = None       # Pillow format name, e.g. "PNG"
    media_type: str | None = None

    @property
    def aspect(self) -> float:
        return self.pixel_width / self.pixel_height


@dataclass
class GridSession:
    """Full application state: one config and at most one image."""
    config: GridConfig = field(default_factory=GridConfig)
    image: LoadedImage | None = None

    @property
    def has_image(self) -> bool:
        return self.image is not None

    def set_image(self, image: LoadedImage):
        self.image = image

    def remove_image(self):
        self.image = None
