"""View layer: Qt widgets for display and interaction.

Contains PreviewWidget (WYSIWYG page view), SettingsPanel and UploadPanel.
"""

from PySide6.QtCore import Qt, QRectF, QPointF, Signal
from PySide6.QtGui import QImage, QPixmap, QPainter, QPen, QColor
from PySide6.QtWidgets import (
    QWidget, QFormLayout, QComboBox, QSpinBox, QSlider, QLabel,
    QVBoxLayout, QHBoxLayout, QGroupBox, QPushButton,
)

from errors import InvalidGeometryError
from grid import GridLayout, compute_layout
from models import GridConfig, GridSession, PAGE_SIZES, CUSTOM, CUT_LINE_COLOR, OPTION_RANGES


# === PreviewWidget: WYSIWYG page view ===

class PreviewWidget(QWidget):
    """Draws the page with the tiled image and dashed cut lines."""

    def __init__(self, session: GridSession, parent=None):
        super().__init__(parent)
        self.session = session
        self._pixmap: QPixmap | None = None
        self.setMinimumSize(300, 400)

    def invalidate_cache(self):
        self._pixmap = None

    def _get_pixmap(self) -> QPixmap | None:
        if self._pixmap is None and self.session.image is not None:
            qimg = QImage.fromData(self.session.image.data)
            if not qimg.isNull():
                self._pixmap = QPixmap.fromImage(qimg)
        return self._pixmap

    def page_scale(self) -> float:
        """Scale factor from page millimetres to screen pixels."""
        c = self.session.config
        padding = 20
        w = max(1, self.width() - 2 * padding)
        h = max(1, self.height() - 2 * padding)
        return min(w / max(1, c.page_width), h / max(1, c.page_height))

    def _page_origin(self, scale: float) -> tuple[float, float]:
        """Top-left corner of the page on screen, centered in widget."""
        c = self.session.config
        return ((self.width() - c.page_width * scale) / 2,
                (self.height() - c.page_height * scale) / 2)

    def current_layout(self) -> GridLayout | None:
        """Layout for the current image and config, or None if there is nothing to draw."""
        img = self.session.image
        if img is None:
            return None
        return compute_layout(self.session.config, img.pixel_width, img.pixel_height)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)

        c = self.session.config
        painter.fillRect(self.rect(), QColor(200, 200, 200))

        scale = self.page_scale()
        ox, oy = self._page_origin(scale)
        page = QRectF(ox, oy, c.page_width * scale, c.page_height * scale)

        # Page shadow
        painter.fillRect(page.translated(3, 3), QColor(150, 150, 150))
        # White page
        painter.fillRect(page, QColor(255, 255, 255))

        try:
            layout = self.current_layout()
        except InvalidGeometryError as e:
            self._paint_message(painter, page, str(e))
        else:
            if layout is None:
                self._paint_message(painter, page, "Upload an image to see preview")
            else:
                self._paint_images(painter, layout, scale, ox, oy)
                self._paint_cut_lines(painter, layout, scale, ox, oy)

        painter.end()

    def _paint_message(self, painter, page: QRectF, text: str):
        painter.setPen(QColor(140, 140, 140))
        painter.drawText(page.adjusted(10, 10, -10, -10),
                         Qt.AlignmentFlag.AlignCenter | Qt.TextFlag.TextWordWrap, text)

    def _paint_images(self, painter, layout: GridLayout, scale, ox, oy):
        pix = self._get_pixmap()
        if pix is None:
            return
        w = layout.draw_width * scale
        h = layout.draw_height * scale
        for placed in layout.placements:
            dest = QRectF(ox + placed.x * scale, oy + placed.y * scale, w, h)
            painter.drawPixmap(dest, pix, QRectF(pix.rect()))

    def _paint_cut_lines(self, painter, layout: GridLayout, scale, ox, oy):
        pen = QPen(QColor(*CUT_LINE_COLOR), 1, Qt.PenStyle.DashLine)
        pen.setCosmetic(True)
        painter.setPen(pen)
        for ln in layout.cut_lines:
            painter.drawLine(QPointF(ox + ln.x1 * scale, oy + ln.y1 * scale),
                             QPointF(ox + ln.x2 * scale, oy + ln.y2 * scale))


# === Settings Panel ===

class SettingsPanel(QGroupBox):
    """Form controls for the grid settings.

    Every user edit is emitted as ``option_changed(key, value)``; the
    panel never writes to the config itself. ``sync_from`` updates the
    controls without re-emitting.
    """

    option_changed = Signal(str, object)

    def __init__(self, config: GridConfig, parent=None):
        super().__init__("Grid Settings", parent)

        form = QFormLayout(self)

        self._page_combo = QComboBox()
        for key, preset in PAGE_SIZES.items():
            self._page_combo.addItem(preset.label, key)
        self._page_combo.currentIndexChanged.connect(
            lambda _: self.option_changed.emit("page_size", self._page_combo.currentData()))
        form.addRow("Page size:", self._page_combo)

        self._width_spin = self._make_spin("page_width", " mm")
        form.addRow("Width:", self._width_spin)
        self._height_spin = self._make_spin("page_height", " mm")
        form.addRow("Height:", self._height_spin)

        self._columns_spin = self._make_spin("columns")
        form.addRow("Columns:", self._columns_spin)
        self._rows_spin = self._make_spin("rows")
        form.addRow("Rows:", self._rows_spin)
        self._margin_spin = self._make_spin("margin", " mm")
        form.addRow("Margin:", self._margin_spin)

        self._scale_label = QLabel()
        self._scale_slider = QSlider(Qt.Orientation.Horizontal)
        self._scale_slider.setRange(*OPTION_RANGES["image_scale"])
        self._scale_slider.valueChanged.connect(
            lambda v: self.option_changed.emit("image_scale", v))
        form.addRow(self._scale_label)
        form.addRow(self._scale_slider)

        self.sync_from(config)

    def _make_spin(self, key: str, suffix: str = "") -> QSpinBox:
        spin = QSpinBox()
        spin.setRange(*OPTION_RANGES[key])
        spin.setSuffix(suffix)
        spin.valueChanged.connect(lambda v: self.option_changed.emit(key, v))
        return spin

    def _widgets(self):
        return (self._page_combo, self._width_spin, self._height_spin, self._columns_spin,
                self._rows_spin, self._margin_spin, self._scale_slider)

    def sync_from(self, config: GridConfig):
        """Show *config* in the controls without emitting option_changed."""
        for w in self._widgets():
            w.blockSignals(True)
        try:
            self._page_combo.setCurrentIndex(self._page_combo.findData(config.page_size))
            self._width_spin.setValue(config.page_width)
            self._height_spin.setValue(config.page_height)
            self._columns_spin.setValue(config.columns)
            self._rows_spin.setValue(config.rows)
            self._margin_spin.setValue(config.margin)
            self._scale_slider.setValue(config.image_scale)
        finally:
            for w in self._widgets():
                w.blockSignals(False)

        custom = config.page_size == CUSTOM
        self._width_spin.setEnabled(custom)
        self._height_spin.setEnabled(custom)
        self._scale_label.setText(f"Image Size: {config.image_scale}%")


# === Upload Panel ===

class UploadPanel(QGroupBox):
    """Image picker: choose button, thumbnail, file name and remove button."""

    browse_requested = Signal()
    remove_requested = Signal()

    THUMB_SIZE = 160
    HINT = "Click to upload or drag and drop\nPNG, JPG, JPEG, GIF, WEBP"

    def __init__(self, parent=None):
        super().__init__("Upload Image", parent)
        layout = QVBoxLayout(self)

        self._thumb = QLabel()
        self._thumb.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._thumb.setMinimumHeight(self.THUMB_SIZE)
        layout.addWidget(self._thumb)

        self._name_label = QLabel()
        self._name_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._name_label)

        row = QHBoxLayout()
        self._browse_btn = QPushButton("Choose Image...")
        self._browse_btn.clicked.connect(lambda: self.browse_requested.emit())
        row.addWidget(self._browse_btn)
        self._remove_btn = QPushButton("Remove")
        self._remove_btn.clicked.connect(lambda: self.remove_requested.emit())
        row.addWidget(self._remove_btn)
        layout.addLayout(row)

        self.clear()

    @property
    def file_name(self) -> str:
        return self._name_label.text()

    def show_image(self, data: bytes, name: str):
        pix = QPixmap()
        pix.loadFromData(data)
        if not pix.isNull():
            self._thumb.setPixmap(pix.scaled(
                self.THUMB_SIZE, self.THUMB_SIZE,
                Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation,
            ))
        self._name_label.setText(name)
        self._remove_btn.setEnabled(True)

    def clear(self):
        self._thumb.clear()
        self._thumb.setText(self.HINT)
        self._name_label.clear()
        self._remove_btn.setEnabled(False)

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            self.browse_requested.emit()
            event.accept()
            return
        super().mousePressEvent(event)
