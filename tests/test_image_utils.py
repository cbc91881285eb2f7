import pytest
from PIL import Image

from log_digitizer.image_utils import DecodedImage, ImageLoadError, decoded_from_pil, load_image, to_rgba_array


@pytest.fixture
def png_path(tmp_path):
    path = tmp_path / "chart.png"
    Image.new("RGB", (64, 48), (255, 255, 255)).save(path)
    return path


class TestLoadImage:

    def test_size_and_mode(self, png_path):
        img = load_image(png_path)
        assert (img.width, img.height) == (64, 48)
        assert img.bitmap.mode == "RGBA"

    def test_accepts_str_path(self, png_path):
        assert load_image(str(png_path)).width == 64

    def test_not_an_image(self, tmp_path):
        bad = tmp_path / "notes.png"
        bad.write_text("not really a png")
        with pytest.raises(ImageLoadError) as exc:
            load_image(bad)
        assert exc.value.__cause__ is not None

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageLoadError):
            load_image(tmp_path / "missing.png")


class TestRgbaArray:

    def test_shape(self, png_path):
        arr = to_rgba_array(load_image(png_path))
        assert arr.shape == (48, 64, 4)
        assert arr.dtype.name == "uint8"
        assert tuple(arr[0, 0]) == (255, 255, 255, 255)

    def test_requires_bitmap(self):
        with pytest.raises(ValueError):
            to_rgba_array(DecodedImage(10, 10))


def test_decoded_from_pil_converts_palette():
    img = Image.new("P", (5, 7))
    d = decoded_from_pil(img)
    assert (d.width, d.height) == (5, 7)
    assert d.bitmap.mode == "RGBA"
