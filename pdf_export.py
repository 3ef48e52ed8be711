"""PDF export: renders the grid layout onto a QPdfWriter page.

The page is drawn in millimetres (the painter is scaled from device
pixels), images first and cut lines on top. The file is written next to
its destination and moved into place only once complete.
"""

import io
import logging
import os
import shutil
import tempfile

from PIL import Image
from PySide6.QtCore import QMarginsF, QPointF, QRectF, QSizeF, Qt, QThread, Signal
from PySide6.QtGui import QColor, QImage, QPageLayout, QPageSize, QPainter, QPdfWriter, QPen

from errors import ExportWriteError, GridSheetError, ImageEncodingError, NoImageError
from grid import GridLayout, compute_layout
from models import (
    GridConfig, LoadedImage,
    CUT_LINE_COLOR, CUT_LINE_DASH_MM, CUT_LINE_WIDTH_MM, DPI, MM_PER_INCH,
)

logger = logging.getLogger(__name__)


def page_layout(config: GridConfig) -> QPageLayout:
    """Borderless page of exactly page_width x page_height mm."""
    short = min(config.page_width, config.page_height)
    long = max(config.page_width, config.page_height)
    orientation = (QPageLayout.Orientation.Portrait if config.is_portrait
                   else QPageLayout.Orientation.Landscape)
    size = QPageSize(QSizeF(short, long), QPageSize.Unit.Millimeter,
                     "", QPageSize.SizeMatchPolicy.ExactMatch)
    return QPageLayout(size, orientation, QMarginsF(0, 0, 0, 0),
                       QPageLayout.Unit.Millimeter)


def image_to_qimage(image: LoadedImage) -> QImage:
    """Decode the stored bytes for painting, normalizing via Pillow if Qt can't."""
    qimg = QImage.fromData(image.data)
    if not qimg.isNull():
        return qimg
    try:
        img = Image.open(io.BytesIO(image.data)).convert("RGBA")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
    except (OSError, ValueError) as e:
        raise ImageEncodingError(f"Cannot convert {image.name}: {e}") from e
    qimg = QImage.fromData(buf.getvalue())
    if qimg.isNull():
        raise ImageEncodingError(f"Qt cannot load {image.name}")
    return qimg


def cut_line_pen() -> QPen:
    pen = QPen(QColor(*CUT_LINE_COLOR))
    pen.setWidthF(CUT_LINE_WIDTH_MM)
    pen.setCapStyle(Qt.PenCapStyle.FlatCap)
    # Dash pattern is expressed in multiples of the pen width
    on, off = CUT_LINE_DASH_MM
    pen.setDashPattern([on / CUT_LINE_WIDTH_MM, off / CUT_LINE_WIDTH_MM])
    return pen


def paint_grid(painter: QPainter, qimage: QImage, layout: GridLayout):
    """Draw every copy of the image, then the dashed cut lines (mm coords)."""
    for p in layout.placements:
        painter.drawImage(QRectF(p.x, p.y, layout.draw_width, layout.draw_height), qimage)

    painter.setPen(cut_line_pen())
    for ln in layout.cut_lines:
        painter.drawLine(QPointF(ln.x1, ln.y1), QPointF(ln.x2, ln.y2))


def export_pdf(image: LoadedImage | None, config: GridConfig, path: str,
               resolution: int = DPI) -> GridLayout:
    """Render the grid to a PDF at *path*. Returns the layout that was drawn.

    Raises a GridSheetError subclass on failure; *path* is left untouched
    in that case.
    """
    if image is None:
        raise NoImageError("No image loaded")
    layout = compute_layout(config, image.pixel_width, image.pixel_height)
    qimage = image_to_qimage(image)

    target_dir = os.path.dirname(os.path.abspath(path))
    try:
        fd, tmp_path = tempfile.mkstemp(suffix=".pdf", prefix=".grid_", dir=target_dir)
        os.close(fd)
    except OSError as e:
        raise ExportWriteError(f"Cannot write to {target_dir}: {e}") from e

    try:
        _render(tmp_path, qimage, layout, config, resolution)
        _match_save_mode(tmp_path, path)
        os.replace(tmp_path, path)
    except OSError as e:
        _discard(tmp_path)
        raise ExportWriteError(f"Cannot save {path}: {e}") from e
    except BaseException:
        _discard(tmp_path)
        raise

    logger.info("Wrote %s (%d cells, %s×%s mm)", path, len(layout.placements),
                config.page_width, config.page_height)
    return layout


def _render(path: str, qimage: QImage, layout: GridLayout, config: GridConfig,
            resolution: int):
    writer = QPdfWriter(path)
    writer.setResolution(resolution)
    writer.setCreator("Grid Sheet Maker")
    writer.setTitle(os.path.basename(path))
    if not writer.setPageLayout(page_layout(config)):
        raise ExportWriteError(
            f"Unsupported page size {config.page_width}×{config.page_height} mm")

    painter = QPainter()
    if not painter.begin(writer):
        raise ExportWriteError(f"Cannot open {path} for writing")
    try:
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        scale = resolution / MM_PER_INCH
        painter.scale(scale, scale)
        paint_grid(painter, qimage, layout)
    except BaseException:
        painter.end()
        raise
    # end() flushes the document trailer
    if not painter.end():
        raise ExportWriteError(f"Cannot finish writing {path}")


def _match_save_mode(tmp_path: str, path: str):
    """Give the temp file the mode a plain save of *path* would have.

    An existing target keeps its mode; a new file gets 0666 minus the umask.
    """
    if os.path.exists(path):
        shutil.copymode(path, tmp_path)
        return
    umask = os.umask(0)
    os.umask(umask)
    os.chmod(tmp_path, 0o666 & ~umask)


def _discard(path: str):
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


class ExportWorker(QThread):
    """Background worker that writes one PDF.

    Signals:
        completed: (success, message) when the export ends either way
    """

    completed = Signal(bool, str)

    def __init__(self, image: LoadedImage, config: GridConfig, path: str, parent=None):
        super().__init__(parent)
        self.image = image
        self.config = config
        self.path = path

    def run(self):
        try:
            export_pdf(self.image, self.config, self.path)
        except GridSheetError as e:
            logger.error("Export failed: %s", e)
            self.completed.emit(False, e.user_message)
            return
        except Exception:
            logger.exception("Unexpected error generating PDF")
            self.completed.emit(False, GridSheetError.user_message)
            return
        self.completed.emit(True, f"Saved {os.path.basename(self.path)}")
