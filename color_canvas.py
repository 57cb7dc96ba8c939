import logging
import sys
from pathlib import Path

from PyQt5.QtWidgets import QApplication

from CC_Libs.ColoringUI.coloring_window import ColoringWindow
from CC_Libs.SessionLib.coloring_config import load_coloring_config
from CC_Libs.SessionLib.drawing_session import DrawingSession
from CC_Libs.StoreLib.drawing_store import DrawingStore
from CC_Libs.StoreLib.image_catalog import ImageCatalog
from CC_Libs.constants import CONFIG_FILE_NAME, DEFAULT_IMAGES_DIR_NAME

APP_DATA_DIR = Path.home() / ".color_canvas"


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    images_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else Path.cwd() / DEFAULT_IMAGES_DIR_NAME
    config = load_coloring_config(APP_DATA_DIR / CONFIG_FILE_NAME)

    app = QApplication(sys.argv)
    window = ColoringWindow(
        catalog=ImageCatalog(images_dir),
        store=DrawingStore(APP_DATA_DIR),
        session=DrawingSession(config),
    )
    window.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
