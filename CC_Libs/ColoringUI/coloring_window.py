"""
PyQt5 host window for Color Canvas.

The window has two pages: a gallery listing the catalog images with
thumbnails, and a coloring page with the canvas, tool buttons, palette and
page actions. All drawing goes through a DrawingSession; the widgets only
forward mouse input and repaint the session buffer.

Classes:
    CanvasWidget: Shows the session buffer and feeds it mouse input
    ColoringWindow: Gallery and coloring pages

Functions:
    buffer_to_qimage: Copy a pixel buffer into a QImage
    thumbnail_icon: Build a gallery icon from a catalog thumbnail URL
"""

from typing import Callable, Optional

from PyQt5.QtCore import QRectF, QSize, Qt, QTimer, QUrl
from PyQt5.QtGui import QColor, QIcon, QImage, QPainter, QPixmap
from PyQt5.QtWidgets import (
    QButtonGroup,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from CC_Libs.CanvasLib.canvas_models import DisplayPoint, DisplayRect, RgbaColor, Tool, parse_hex_color
from CC_Libs.CanvasLib.coordinate_mapper import fitted_rect
from CC_Libs.CanvasLib.pixel_buffer import PixelBuffer
from CC_Libs.SessionLib.drawing_session import DrawingSession, SessionState
from CC_Libs.SessionLib.image_loader import AsyncImageLoader
from CC_Libs.StoreLib.drawing_store import DrawingStore
from CC_Libs.StoreLib.image_catalog import CatalogImage, ImageCatalog
from CC_Libs.errors import ImageLoadError
from CC_Libs.constants import (
    CANVAS_MIN_SIZE,
    DEFAULT_COLOR,
    DEFAULT_PALETTE,
    DEFAULT_WINDOW_HEIGHT,
    DEFAULT_WINDOW_WIDTH,
    FRAME_INTERVAL_MS,
    LOAD_POLL_INTERVAL_MS,
    SWATCH_SIZE,
    THUMBNAIL_SIZE,
)


def buffer_to_qimage(buffer: PixelBuffer) -> QImage:
    """Copy a pixel buffer into a QImage that owns its memory."""
    image = QImage(
        buffer.samples.tobytes(),
        buffer.width,
        buffer.height,
        buffer.width * 4,
        QImage.Format_RGBA8888,
    )
    return image.copy()


def thumbnail_icon(thumbnail_url: str) -> QIcon:
    """Load a file:// thumbnail into an icon scaled to THUMBNAIL_SIZE. Unreadable files give an empty icon."""
    pixmap = QPixmap(QUrl(thumbnail_url).toLocalFile())
    if pixmap.isNull():
        return QIcon()
    return QIcon(
        pixmap.scaled(THUMBNAIL_SIZE, THUMBNAIL_SIZE, Qt.KeepAspectRatio, Qt.SmoothTransformation)
    )


class CanvasWidget(QWidget):
    """Shows the session buffer fitted to the widget and feeds it mouse input."""

    def __init__(
        self,
        session: DrawingSession,
        current_tool: Callable[[], Tool],
        current_color: Callable[[], RgbaColor],
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.session = session
        self._current_tool = current_tool
        self._current_color = current_color
        self.setMinimumSize(CANVAS_MIN_SIZE, CANVAS_MIN_SIZE)
        self.setMouseTracking(False)

        self._frame_timer = QTimer(self)
        self._frame_timer.setInterval(FRAME_INTERVAL_MS)
        self._frame_timer.timeout.connect(self._on_frame)
        self._frame_timer.start()

    def rendered_rect(self) -> Optional[DisplayRect]:
        buffer = self.session.buffer
        if buffer is None:
            return None
        container = DisplayRect(0, 0, self.width(), self.height())
        return fitted_rect(container, buffer.width, buffer.height)

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor("#e5e7eb"))
        rect = self.rendered_rect()
        if rect is not None:
            target = QRectF(rect.left, rect.top, rect.width, rect.height)
            painter.drawImage(target, buffer_to_qimage(self.session.buffer))
        painter.end()

    def mousePressEvent(self, event) -> None:
        rect = self.rendered_rect()
        if rect is None or event.button() != Qt.LeftButton:
            return
        point = DisplayPoint(event.x(), event.y())
        self.session.pointer_down(point, rect, self._current_tool(), self._current_color())
        self.update()

    def mouseMoveEvent(self, event) -> None:
        rect = self.rendered_rect()
        if rect is None:
            return
        if self.session.pointer_move(DisplayPoint(event.x(), event.y()), rect, self._current_color()):
            if not self.session.config.coalesce_moves:
                self.update()

    def mouseReleaseEvent(self, event) -> None:
        self.session.pointer_up()
        self.update()

    def leaveEvent(self, event) -> None:
        self.session.pointer_up()
        self.update()

    def _on_frame(self) -> None:
        if self.session.flush_pending():
            self.update()


class ColoringWindow(QMainWindow):
    def __init__(
        self,
        catalog: ImageCatalog,
        store: DrawingStore,
        session: Optional[DrawingSession] = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("Color Canvas")
        self.resize(DEFAULT_WINDOW_WIDTH, DEFAULT_WINDOW_HEIGHT)

        self.catalog = catalog
        self.store = store
        self.session = session or DrawingSession()
        self.loader = AsyncImageLoader(self.catalog.load)
        self.entries: list = []
        self.current_tool = Tool.BRUSH
        self.current_color: RgbaColor = parse_hex_color(DEFAULT_COLOR)

        self._build_ui()
        self._connect_signals()
        self.refresh_gallery()

        self._load_timer = QTimer(self)
        self._load_timer.setInterval(LOAD_POLL_INTERVAL_MS)
        self._load_timer.timeout.connect(self._poll_loads)
        self._load_timer.start()

    def _build_ui(self) -> None:
        self.pages = QStackedWidget(self)
        self.setCentralWidget(self.pages)

        # Gallery page
        gallery = QWidget()
        gallery_col = QVBoxLayout(gallery)
        gallery_col.addWidget(QLabel("Choose an Image to Color"))
        self.images_list = QListWidget()
        self.images_list.setIconSize(QSize(THUMBNAIL_SIZE, THUMBNAIL_SIZE))
        gallery_col.addWidget(self.images_list)
        self.pages.addWidget(gallery)

        # Coloring page
        coloring = QWidget()
        coloring_col = QVBoxLayout(coloring)

        header = QHBoxLayout()
        self.btn_back = QPushButton("Back to Gallery")
        self.label_title = QLabel("")
        self.btn_clear = QPushButton("Clear All")
        self.btn_save = QPushButton("Save")
        header.addWidget(self.btn_back)
        header.addWidget(self.label_title, stretch=1)
        header.addWidget(self.btn_clear)
        header.addWidget(self.btn_save)

        workspace = QHBoxLayout()
        tools_col = QVBoxLayout()
        self.btn_brush = QPushButton("Brush")
        self.btn_fill = QPushButton("Fill")
        self.tool_group = QButtonGroup(self)
        for button in (self.btn_brush, self.btn_fill):
            button.setCheckable(True)
            self.tool_group.addButton(button)
            tools_col.addWidget(button)
        self.btn_brush.setChecked(True)
        tools_col.addStretch(1)

        self.canvas = CanvasWidget(
            self.session,
            current_tool=lambda: self.current_tool,
            current_color=lambda: self.current_color,
        )

        palette_grid = QGridLayout()
        for i, hex_color in enumerate(DEFAULT_PALETTE):
            swatch = QPushButton()
            swatch.setFixedSize(SWATCH_SIZE, SWATCH_SIZE)
            swatch.setStyleSheet(f"background-color: {hex_color}; border: 1px solid #888;")
            swatch.setToolTip(hex_color)
            swatch.clicked.connect(lambda _checked=False, value=hex_color: self.select_color(value))
            palette_grid.addWidget(swatch, i // 2, i % 2)

        workspace.addLayout(tools_col)
        workspace.addWidget(self.canvas, stretch=1)
        workspace.addLayout(palette_grid)

        self.label_status = QLabel("")

        coloring_col.addLayout(header)
        coloring_col.addLayout(workspace, stretch=1)
        coloring_col.addWidget(self.label_status)
        self.pages.addWidget(coloring)

    def _connect_signals(self) -> None:
        self.images_list.itemDoubleClicked.connect(self.on_image_chosen)
        self.btn_back.clicked.connect(self.show_gallery)
        self.btn_clear.clicked.connect(self.clear_all)
        self.btn_save.clicked.connect(self.save_drawing)
        self.btn_brush.clicked.connect(lambda: self.select_tool(Tool.BRUSH))
        self.btn_fill.clicked.connect(lambda: self.select_tool(Tool.FILL))

    def refresh_gallery(self) -> None:
        self.entries = self.catalog.list_images()
        self.images_list.clear()
        for entry in self.entries:
            self.images_list.addItem(QListWidgetItem(thumbnail_icon(entry.thumbnail_url), entry.name))

    def on_image_chosen(self) -> None:
        row = self.images_list.currentRow()
        if row < 0 or row >= len(self.entries):
            return
        self.open_image(self.entries[row])

    def open_image(self, entry: CatalogImage) -> None:
        try:
            source_path = self.catalog.get_image(entry.id).path
        except ImageLoadError:
            # The loader reports the missing file through the session.
            source_path = None
        ticket = self.session.open_image(entry.id, source_path)
        self.loader.request(ticket, entry.id)
        self.label_title.setText(entry.name)
        self.label_status.setText("Loading coloring page...")
        self.pages.setCurrentIndex(1)
        self.canvas.update()

    def _poll_loads(self) -> None:
        for result in self.loader.collect_finished():
            if not self.session.apply_load_result(result):
                continue
            if self.session.state is SessionState.FAILED:
                self.label_status.setText(self.session.error_message or "Failed to load image")
            else:
                self.label_status.setText("")
            self.canvas.update()

    def show_gallery(self) -> None:
        self.session.close()
        self.pages.setCurrentIndex(0)

    def select_tool(self, tool: Tool) -> None:
        self.current_tool = tool

    def select_color(self, hex_color: str) -> None:
        self.current_color = parse_hex_color(hex_color)

    def clear_all(self) -> None:
        if self.session.clear_all():
            self.canvas.update()

    def save_drawing(self) -> None:
        if not self.session.has_buffer:
            return

        saved = self.session.save(self.store)
        if saved is None:
            QMessageBox.warning(
                self,
                "Save Failed",
                f"Your drawing is still here; try again.\n\n{self.session.last_save_error}",
            )
            return
        self._show_info("Saved", "Drawing saved successfully!")

    def _show_info(self, title: str, message: str) -> None:
        QMessageBox.information(self, title, message)

    def closeEvent(self, event) -> None:
        self.loader.shutdown()
        super().closeEvent(event)
