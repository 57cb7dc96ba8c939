"""
Line-art image catalog for Color Canvas.

The catalog is a directory of image files. Each supported file is one
colorable image whose id is the file stem.

Classes:
    CatalogImage: Listing entry shown in the gallery
    ImageSource: A fetched image ready to decode
    ImageCatalog: Directory-backed catalog

Functions:
    is_supported_format: Check whether a path has a supported image extension
    display_name_for: Turn a file stem into a human readable title
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List

from CC_Libs.constants import EXPORT_MODE, SUPPORTED_STANDARD_IMAGES
from CC_Libs.errors import ImageLoadError
from CC_Libs.pillow_compat import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogImage:
    id: str
    name: str
    thumbnail_url: str


@dataclass(frozen=True)
class ImageSource:
    id: str
    name: str
    path: Path


def is_supported_format(file_path: Path) -> bool:
    return file_path.suffix.lower() in SUPPORTED_STANDARD_IMAGES


def display_name_for(stem: str) -> str:
    words = stem.replace("_", " ").replace("-", " ").split()
    return " ".join(word.capitalize() for word in words) or stem


class ImageCatalog:
    """
    Lists and fetches line-art images stored in one directory.

    Example:
        >>> catalog = ImageCatalog(Path("Images"))
        >>> [entry.id for entry in catalog.list_images()]
        ['butterfly', 'castle']
        >>> image = catalog.decode_image(catalog.get_image("castle"))
    """

    def __init__(self, images_dir: Path) -> None:
        self.images_dir = Path(images_dir)

    def _image_paths(self) -> List[Path]:
        if not self.images_dir.is_dir():
            logger.warning("Image directory does not exist: %s", self.images_dir)
            return []
        return sorted(
            path for path in self.images_dir.iterdir()
            if path.is_file() and is_supported_format(path)
        )

    def list_images(self) -> List[CatalogImage]:
        """
        List all colorable images.

        Returns:
            Catalog entries sorted by file name; thumbnails are file:// URIs
        """
        return [
            CatalogImage(
                id=path.stem,
                name=display_name_for(path.stem),
                thumbnail_url=path.resolve().as_uri(),
            )
            for path in self._image_paths()
        ]

    def get_image(self, image_id: str) -> ImageSource:
        """
        Look up an image by id.

        Raises:
            ImageLoadError: If no supported file has that id
        """
        for path in self._image_paths():
            if path.stem == image_id:
                return ImageSource(id=path.stem, name=display_name_for(path.stem), path=path)
        raise ImageLoadError(image_id, "not found")

    def decode_image(self, source: ImageSource) -> Any:
        """
        Decode an image file into an RGBA PIL image.

        Raises:
            ImageLoadError: If the file is missing or is not a readable image
        """
        try:
            with Image.open(source.path) as image:
                image.load()
                return image.convert(EXPORT_MODE)
        except FileNotFoundError as exc:
            raise ImageLoadError(source.id, "file is missing") from exc
        except (UnidentifiedImageError, OSError) as exc:
            raise ImageLoadError(source.id, f"decode failed ({exc})") from exc

    def load(self, image_id: str) -> Any:
        """Fetch and decode in one step."""
        return self.decode_image(self.get_image(image_id))
