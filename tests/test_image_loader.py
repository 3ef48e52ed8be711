"""Tests for image decoding and the background loader."""
import pytest

from errors import ImageDecodeError
from image_loader import ImageLoader, decode_image, is_image_type, media_type_for


@pytest.fixture
def loader(qapp):
    ldr = ImageLoader()
    yield ldr
    ldr.wait()


class TestMediaType:

    @pytest.mark.parametrize("name,expected", [
        ("photo.png", True), ("photo.JPG", True), ("anim.gif", True),
        ("notes.txt", False), ("doc.pdf", False), ("noext", False),
    ])
    def test_is_image_by_name(self, name, expected):
        assert is_image_type(media_type_for(name)) is expected

    def test_none_is_not_image(self):
        assert not is_image_type(None)


class TestDecodeImage:

    def test_png(self, image_file):
        img = decode_image(image_file)
        assert (img.pixel_width, img.pixel_height) == (800, 600)
        assert img.name == "circle.png"
        assert img.format == "PNG"
        assert img.media_type == "image/png"

    def test_keeps_original_bytes(self, tmp_path, make_image_bytes):
        data = make_image_bytes(64, 32, "green", "JPEG")
        path = tmp_path / "small.jpg"
        path.write_bytes(data)
        img = decode_image(str(path))
        assert img.data == data
        assert img.format == "JPEG"

    def test_garbage(self, tmp_path):
        path = tmp_path / "fake.png"
        path.write_bytes(b"definitely not a png")
        with pytest.raises(ImageDecodeError):
            decode_image(str(path))

    def test_truncated(self, tmp_path, circle_png):
        path = tmp_path / "cut.png"
        path.write_bytes(circle_png[: len(circle_png) // 2])
        with pytest.raises(ImageDecodeError):
            decode_image(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageDecodeError):
            decode_image(str(tmp_path / "gone.png"))


class TestImageLoader:

    def test_load_publishes_image(self, qtbot, loader, image_file):
        with qtbot.waitSignal(loader.image_loaded, timeout=5000) as blocker:
            assert loader.load(image_file) is True
        assert blocker.args[0].pixel_width == 800

    def test_non_image_rejected(self, qtbot, loader, tmp_path):
        path = tmp_path / "readme.txt"
        path.write_text("hello")
        with qtbot.waitSignal(loader.file_rejected, timeout=1000) as blocker:
            assert loader.load(str(path)) is False
        assert "readme.txt" in blocker.args[0]

    def test_declared_type_wins(self, qtbot, loader, image_file):
        assert loader.load(image_file, media_type="text/plain") is False

    def test_corrupt_file_reports_failure(self, qtbot, loader, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"\x89PNG\r\n\x1a\n garbage")
        with qtbot.waitSignal(loader.load_failed, timeout=5000):
            loader.load(str(path))

    def test_latest_load_wins(self, qapp, qtbot, loader, tmp_path, make_image_bytes):
        first = tmp_path / "first.png"
        first.write_bytes(make_image_bytes(400, 400))
        second = tmp_path / "second.png"
        second.write_bytes(make_image_bytes(200, 100, "blue"))

        received = []
        loader.image_loaded.connect(lambda img: received.append(img.name))
        loader.load(str(first))
        with qtbot.waitSignal(loader.image_loaded, timeout=5000):
            loader.load(str(second))
        loader.wait()
        qapp.processEvents()
        assert received == ["second.png"]

    def test_cancel_drops_result(self, qapp, loader, image_file):
        received = []
        loader.image_loaded.connect(received.append)
        loader.load(image_file)
        loader.cancel()
        loader.wait()
        qapp.processEvents()
        assert received == []
