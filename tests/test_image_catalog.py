"""
Unit tests for image_catalog module.

Tests listing, lookup and decoding of line-art images.
"""

from pathlib import Path

import pytest

from CC_Libs.StoreLib.image_catalog import (
    ImageCatalog,
    ImageSource,
    display_name_for,
    is_supported_format,
)
from CC_Libs.errors import ImageLoadError


class TestHelpers:
    """Tests for module helper functions."""

    @pytest.mark.parametrize("name", ["a.png", "b.JPG", "c.jpeg", "d.bmp"])
    def test_supported_formats(self, name):
        assert is_supported_format(Path(name))

    @pytest.mark.parametrize("name", ["notes.txt", "drawing.svg", "archive"])
    def test_unsupported_formats(self, name):
        assert not is_supported_format(Path(name))

    def test_display_name(self):
        assert display_name_for("happy_butterfly") == "Happy Butterfly"
        assert display_name_for("sea-turtle") == "Sea Turtle"


class TestListImages:
    """Tests for ImageCatalog.list_images."""

    def test_lists_supported_files_sorted(self, images_dir):
        entries = ImageCatalog(images_dir).list_images()

        assert [e.id for e in entries] == ["castle", "happy_butterfly", "tree"]
        assert entries[1].name == "Happy Butterfly"
        assert entries[0].thumbnail_url.startswith("file://")
        assert entries[0].thumbnail_url.endswith("castle.png")

    def test_missing_directory_lists_nothing(self, tmp_path):
        assert ImageCatalog(tmp_path / "nowhere").list_images() == []


class TestGetAndDecode:
    """Tests for ImageCatalog.get_image and decode_image."""

    def test_get_image(self, images_dir):
        source = ImageCatalog(images_dir).get_image("tree")

        assert source.path == images_dir / "tree.jpg"
        assert source.name == "Tree"

    def test_unknown_id_raises(self, images_dir):
        with pytest.raises(ImageLoadError) as excinfo:
            ImageCatalog(images_dir).get_image("dragon")

        assert excinfo.value.image_id == "dragon"

    def test_decode_converts_to_rgba(self, images_dir):
        catalog = ImageCatalog(images_dir)

        image = catalog.load("happy_butterfly")

        assert image.mode == "RGBA"
        assert image.size == (16, 16)
        assert image.getpixel((0, 0)) == (255, 255, 255, 255)

    def test_decode_corrupt_file(self, images_dir):
        (images_dir / "broken.png").write_bytes(b"definitely not a png")
        catalog = ImageCatalog(images_dir)

        with pytest.raises(ImageLoadError) as excinfo:
            catalog.load("broken")

        assert "decode failed" in excinfo.value.reason

    def test_decode_missing_file(self, images_dir):
        source = ImageSource(id="gone", name="Gone", path=images_dir / "gone.png")

        with pytest.raises(ImageLoadError) as excinfo:
            ImageCatalog(images_dir).decode_image(source)

        assert excinfo.value.reason == "file is missing"
