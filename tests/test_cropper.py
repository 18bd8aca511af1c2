from io import BytesIO

import pytest
from PIL import Image

from exam_pdf.cropper import compute_crop_region, crop_region, crop_regions
from exam_pdf.errors import CropOutOfBounds, InvalidBoundingBox
from exam_pdf.models.bounding_box import BoundingBox
from exam_pdf.models.cropped_image import CropRegion
from exam_pdf.models.page_models import PageImage


def box(**fields):
    return BoundingBox(**fields)


def test_scales_from_reference_dimensions():
    bbox = box(x=0, y=0, width=100, height=100, page_width=200, page_height=200)
    assert compute_crop_region(bbox, (400, 400)) == CropRegion(0, 0, 200, 200)


def test_scales_each_axis_independently():
    bbox = box(x=10, y=10, width=50, height=50, page_width=100, page_height=200)
    assert compute_crop_region(bbox, (300, 400)) == CropRegion(30, 20, 150, 100)


def test_without_reference_uses_image_pixels():
    bbox = box(x=100, y=150, width=400, height=300)
    assert compute_crop_region(bbox, (1000, 800)) == CropRegion(100, 150, 400, 300)


def test_zero_reference_falls_back_to_image_size():
    bbox = box(x=5, y=5, width=10, height=10, page_width=0, page_height=0)
    assert compute_crop_region(bbox, (50, 50)) == CropRegion(5, 5, 10, 10)


def test_rounds_half_up():
    # 1 * (4 / 8) = 0.5 and 3 * (4 / 8) = 1.5
    bbox = box(x=1, y=3, width=5, height=5, page_width=8, page_height=8)
    assert compute_crop_region(bbox, (4, 4)) == CropRegion(1, 2, 3, 2)


def test_clamps_to_image_bounds():
    bbox = box(x=900, y=700, width=300, height=300)
    assert compute_crop_region(bbox, (1000, 800)) == CropRegion(900, 700, 100, 100)


def test_negative_origin_floors_at_zero():
    bbox = box(x=-20, y=-5, width=60, height=30)
    assert compute_crop_region(bbox, (100, 100)) == CropRegion(0, 0, 60, 30)


def test_tiny_box_gets_one_pixel():
    bbox = box(x=10, y=10, width=0.2, height=0, page_width=100, page_height=100)
    assert compute_crop_region(bbox, (100, 100)) == CropRegion(10, 10, 1, 1)


def test_box_outside_image_is_out_of_bounds():
    with pytest.raises(CropOutOfBounds) as excinfo:
        compute_crop_region(box(x=1000, y=0, width=50, height=50), (400, 400))
    assert excinfo.value.region.left == 1000


def test_box_below_image_is_out_of_bounds():
    with pytest.raises(CropOutOfBounds):
        compute_crop_region(box(x=0, y=400, width=50, height=50), (400, 400))


def test_no_usable_reference_fails_fast():
    with pytest.raises(InvalidBoundingBox):
        compute_crop_region(box(x=0, y=0, width=1, height=1), (0, 0))


def test_crop_extracts_exact_pixels(page_image_factory):
    page = page_image_factory(400, 400, square=(100, 100, 200, 200), page_num=4)

    cropped = crop_region(
        page,
        {"x": 50, "y": 50, "width": 50, "height": 50, "page_width": 200, "page_height": 200},
    )

    assert cropped.page_num == 4
    assert cropped.region == CropRegion(100, 100, 100, 100)
    assert cropped.dimensions == (100, 100)
    with cropped.to_pil_image() as img:
        assert img.mode == "RGBA"
        assert img.size == (100, 100)
        assert img.getcolors() == [(100 * 100, (255, 0, 0, 255))]


def test_crop_keeps_surrounding_pixels_out(page_image_factory):
    page = page_image_factory(400, 400, square=(100, 100, 200, 200))
    cropped = crop_region(page, BoundingBox(x=90, y=100, width=20, height=10))
    with cropped.to_pil_image() as img:
        assert img.getpixel((0, 0)) == (255, 255, 255, 255)
        assert img.getpixel((19, 9)) == (255, 0, 0, 255)


def test_rgb_page_comes_out_rgba():
    buffer = BytesIO()
    Image.new("RGB", (20, 20), (0, 128, 0)).save(buffer, format="PNG")
    rgb_page = PageImage(page_num=1, image_bytes=buffer.getvalue(), dimensions=(20, 20))
    cropped = crop_region(rgb_page, {"x": 0, "y": 0, "width": 5, "height": 5})
    with cropped.to_pil_image() as out:
        assert out.mode == "RGBA"


def test_missing_width_fails_before_decoding():
    garbage = PageImage(page_num=1, image_bytes=b"not a png", dimensions=(400, 400))
    with pytest.raises(InvalidBoundingBox, match="width"):
        crop_region(garbage, {"x": 0, "y": 0, "height": 10})


def test_missing_box_is_invalid(page_image_factory):
    with pytest.raises(InvalidBoundingBox):
        crop_region(page_image_factory(), None)


def test_crop_regions_many_boxes(page_image_factory):
    page = page_image_factory(400, 400, square=(0, 0, 100, 100))
    results = crop_regions(
        page,
        [
            {"x": 0, "y": 0, "width": 100, "height": 100},
            {"x1": 200, "y1": 200, "x2": 300, "y2": 250},
        ],
    )
    assert [r.region for r in results] == [CropRegion(0, 0, 100, 100), CropRegion(200, 200, 100, 50)]


def test_crop_regions_validates_all_boxes_first():
    garbage = PageImage(page_num=1, image_bytes=b"", dimensions=(1, 1))
    with pytest.raises(InvalidBoundingBox):
        crop_regions(garbage, [{"x": 0, "y": 0, "width": 1, "height": 1}, {"x": "a"}])
    assert crop_regions(garbage, []) == []
