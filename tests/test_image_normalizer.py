import io

import pytest
from PIL import Image

from conftest import make_image_bytes
from portrait_api.core.exceptions import BadRequestError
from portrait_api.services.image_normalizer import PortraitNormalizer


def _decode(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


@pytest.mark.parametrize(
    "fmt,mode,size,color",
    [
        ("JPEG", "RGB", (640, 480), (10, 120, 200)),
        ("PNG", "RGBA", (300, 900), (10, 200, 10, 128)),
        ("PNG", "L", (512, 512), 90),
        ("WEBP", "RGBA", (100, 60), (255, 255, 0, 0)),
        ("GIF", "P", (33, 77), 3),
    ],
)
def test_output_is_512_square_jpeg(fmt, mode, size, color):
    data = make_image_bytes(fmt, size, mode, color)

    result = PortraitNormalizer().normalize(data)

    img = _decode(result.image_bytes)
    assert img.format == "JPEG"
    assert img.size == (512, 512)
    assert img.mode == "RGB"
    assert (result.width, result.height) == (512, 512)


def test_gif_with_transparency_does_not_crash():
    img = Image.new("P", (40, 20), 0)
    img.putpalette([0, 0, 0, 255, 0, 0] + [0] * (256 * 3 - 6))
    buf = io.BytesIO()
    img.save(buf, format="GIF", transparency=0)

    result = PortraitNormalizer().normalize(buf.getvalue())

    assert _decode(result.image_bytes).size == (512, 512)


def test_wide_image_is_center_cropped():
    # 가운데에만 빨간 블록이 있는 300x100 흰 이미지
    src = Image.new("RGB", (300, 100), (255, 255, 255))
    for x in range(140, 160):
        for y in range(40, 60):
            src.putpixel((x, y), (255, 0, 0))
    buf = io.BytesIO()
    src.save(buf, format="PNG")

    out = _decode(PortraitNormalizer().normalize(buf.getvalue()).image_bytes)

    r, g, b = out.getpixel((256, 256))
    assert r > 200 and g < 80 and b < 80
    for corner in [(5, 5), (506, 5), (5, 506), (506, 506)]:
        cr, cg, cb = out.getpixel(corner)
        assert cr > 200 and cg > 200 and cb > 200


def test_tall_image_keeps_marker_centered():
    src = Image.new("RGB", (120, 360), (0, 0, 0))
    for x in range(55, 65):
        for y in range(175, 185):
            src.putpixel((x, y), (0, 255, 0))
    buf = io.BytesIO()
    src.save(buf, format="PNG")

    out = _decode(PortraitNormalizer().normalize(buf.getvalue()).image_bytes)

    r, g, b = out.getpixel((256, 256))
    assert g > 200 and r < 80 and b < 80
    assert out.getpixel((256, 10))[1] < 60


def test_center_square_box_offsets():
    assert PortraitNormalizer.center_square_box(300, 100) == (100.0, 0.0, 200.0, 100.0)
    assert PortraitNormalizer.center_square_box(101, 100) == (0.5, 0.0, 100.5, 100.0)
    assert PortraitNormalizer.center_square_box(50, 50) == (0.0, 0.0, 50.0, 50.0)


def test_custom_size_and_quality():
    data = make_image_bytes("PNG", (200, 100))
    result = PortraitNormalizer(target_size=128, quality=60).normalize(data)
    assert _decode(result.image_bytes).size == (128, 128)


@pytest.mark.parametrize(
    "blob",
    [
        b"",
        b"not an image at all",
        make_image_bytes("PNG", (64, 64))[:40],
    ],
)
def test_undecodable_data_is_bad_request(blob):
    with pytest.raises(BadRequestError) as exc_info:
        PortraitNormalizer().normalize(blob)
    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Invalid image data"


def test_formats_outside_data_uri_list_are_rejected():
    data = make_image_bytes("BMP", (64, 64))

    with pytest.raises(BadRequestError) as exc_info:
        PortraitNormalizer().normalize(data)
    assert exc_info.value.message == "Invalid image data"
