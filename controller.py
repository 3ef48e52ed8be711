"""Controller layer: MainWindow and GridApp.

Orchestrates the session, image loader, exporter and views.
"""

import dataclasses
import logging

from PySide6.QtCore import QEvent, Signal
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QApplication, QMainWindow, QStatusBar, QFileDialog, QMessageBox,
    QWidget, QHBoxLayout, QVBoxLayout, QPushButton, QLabel,
)

from errors import InvalidGeometryError
from grid import output_filename
from image_loader import ImageLoader
from models import GridSession, LoadedImage
from pdf_export import ExportWorker
from views import PreviewWidget, SettingsPanel, UploadPanel

logger = logging.getLogger(__name__)

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.gif *.webp *.bmp *.tif *.tiff);;All Files (*)"
PDF_FILTER = "PDF Files (*.pdf)"


# === MainWindow ===

class MainWindow(QMainWindow):
    """Top-level window: upload and settings on the left, preview on the right."""

    def __init__(self):
        super().__init__()
        self.session = GridSession()
        self.loader = ImageLoader(self)
        self._export_worker: ExportWorker | None = None

        self.setWindowTitle("Grid Sheet Maker")
        self.resize(1000, 800)
        self.setAcceptDrops(True)

        self.upload_panel = UploadPanel()
        self.settings_panel = SettingsPanel(self.session.config)
        self.generate_button = QPushButton("Generate PDF")
        self.preview = PreviewWidget(self.session)

        left = QVBoxLayout()
        left.addWidget(self.upload_panel)
        left.addWidget(self.settings_panel)
        left.addWidget(self.generate_button)
        left.addStretch()

        central = QWidget()
        row = QHBoxLayout(central)
        row.addLayout(left)
        row.addWidget(self.preview, 1)
        self.setCentralWidget(central)

        self.upload_panel.browse_requested.connect(self._browse)
        self.upload_panel.remove_requested.connect(self.remove_image)
        self.settings_panel.option_changed.connect(self.set_option)
        self.generate_button.clicked.connect(self._generate)

        self.loader.image_loaded.connect(self._on_image_loaded)
        self.loader.load_failed.connect(self._on_load_failed)
        self.loader.file_rejected.connect(self._on_load_failed)

        self._build_menus()
        self._status = QStatusBar()
        self._stats_label = QLabel()
        self._status.addPermanentWidget(self._stats_label)
        self.setStatusBar(self._status)
        self._refresh()

    def _build_menus(self):
        mb = self.menuBar()

        about_act = QAction("&About Grid Sheet Maker", self)
        about_act.setMenuRole(QAction.MenuRole.AboutRole)
        about_act.triggered.connect(self._show_about)

        # --- File menu ---
        file_menu = mb.addMenu("&File")

        act = QAction("&Open Image...", self)
        act.setShortcut(QKeySequence.StandardKey.Open)
        act.triggered.connect(self._browse)
        file_menu.addAction(act)

        self._remove_action = QAction("&Remove Image", self)
        self._remove_action.triggered.connect(self.remove_image)
        file_menu.addAction(self._remove_action)

        file_menu.addSeparator()

        self._export_action = QAction("&Generate PDF...", self)
        self._export_action.setShortcut(QKeySequence("Ctrl+E"))
        self._export_action.triggered.connect(self._generate)
        file_menu.addAction(self._export_action)

        file_menu.addSeparator()

        act = QAction("&Quit", self)
        act.setShortcut(QKeySequence.StandardKey.Quit)
        act.triggered.connect(self.close)
        file_menu.addAction(act)

        file_menu.addAction(about_act)

    # --- Config ---

    def set_option(self, key: str, value):
        """Apply a settings edit and refresh controls and preview."""
        if self.session.config.set_option(key, value):
            logger.debug("%s -> %r", key, value)
        self.settings_panel.sync_from(self.session.config)
        self._refresh()

    # --- Image ---

    def load_image_file(self, path: str) -> bool:
        """Start loading an image from disk. Used by Open, drop, argv and FileOpen."""
        return self.loader.load(path)

    def remove_image(self):
        """Drop the current image and cancel any pending load."""
        self.loader.cancel()
        self.session.remove_image()
        self.upload_panel.clear()
        self.preview.invalidate_cache()
        self._refresh()

    def _browse(self):
        path, _ = QFileDialog.getOpenFileName(self, "Choose Image", "", IMAGE_FILTER)
        if path:
            self.load_image_file(path)

    def _on_image_loaded(self, image: LoadedImage):
        self.session.set_image(image)
        self.upload_panel.show_image(image.data, image.name)
        self.preview.invalidate_cache()
        self._refresh()

    def _on_load_failed(self, message: str):
        self._status.showMessage(message, 5000)

    # --- Drag and drop ---

    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()

    def dragMoveEvent(self, event):
        event.acceptProposedAction()

    def dropEvent(self, event):
        urls = event.mimeData().urls()
        # Single-image tool: only the first dropped file counts
        path = urls[0].toLocalFile() if urls else ""
        if path:
            self.load_image_file(path)
        event.acceptProposedAction()

    # --- Export ---

    @property
    def exporting(self) -> bool:
        return self._export_worker is not None

    def _generate(self):
        if self.exporting or not self.session.has_image:
            return
        try:
            self.session.config.validate()
        except InvalidGeometryError as e:
            QMessageBox.warning(self, "Invalid Grid", e.user_message)
            return
        default = output_filename(self.session.config)
        path, _ = QFileDialog.getSaveFileName(self, "Save PDF", default, PDF_FILTER)
        if not path:
            return
        if not path.lower().endswith(".pdf"):
            path += ".pdf"
        self.start_export(path)

    def start_export(self, path: str) -> ExportWorker | None:
        """Export a snapshot of the current session to *path* in the background."""
        if self.exporting or self.session.image is None:
            return None
        config = dataclasses.replace(self.session.config)
        worker = ExportWorker(self.session.image, config, path, parent=self)
        worker.completed.connect(self._on_export_completed)
        worker.finished.connect(worker.deleteLater)
        self._export_worker = worker
        logger.info("Generating %s", path)
        self._refresh()
        worker.start()
        return worker

    def _on_export_completed(self, success: bool, message: str):
        self._export_worker = None
        self._refresh()
        if success:
            self._status.showMessage(message, 5000)
        else:
            QMessageBox.critical(self, "Export Error", message)

    # --- Status ---

    def _show_about(self):
        QMessageBox.about(
            self,
            "About Grid Sheet Maker",
            "Grid Sheet Maker\n\n"
            "Repeat one image in a grid and print it\n"
            "as a PDF with dashed cut lines.",
        )

    def _refresh(self):
        has_image = self.session.has_image
        self._remove_action.setEnabled(has_image)
        can_export = has_image and not self.exporting
        self.generate_button.setEnabled(can_export)
        self._export_action.setEnabled(can_export)
        self.generate_button.setText("Generating..." if self.exporting else "Generate PDF")
        self.preview.update()
        self._update_status()

    def status_text(self) -> str:
        c = self.session.config
        n = c.total_cells
        page = f"{c.page.name} ({c.page_width} × {c.page_height} mm)"
        try:
            c.validate()
        except InvalidGeometryError:
            return f"{n} image{'s' if n != 1 else ''} | {page}"
        return (f"{n} image{'s' if n != 1 else ''} | "
                f"{c.cell_width:.1f} × {c.cell_height:.1f} mm each | {page}")

    def _update_status(self):
        self._stats_label.setText(self.status_text())

    def closeEvent(self, event):
        self.loader.cancel()
        self.loader.wait()
        for worker in self.findChildren(ExportWorker):
            worker.wait()
        event.accept()


# === GridApp: custom QApplication for macOS file open events ===

class GridApp(QApplication):
    """QApplication subclass that handles macOS QFileOpenEvent."""

    file_open_requested = Signal(str)

    def event(self, event):
        if event.type() == QEvent.Type.FileOpen:
            self.file_open_requested.emit(event.file())
            return True
        return super().event(event)
