from platescan.netimage import NetImage
from platescan.polygon import draw_polygon


def _image(width, height, value=7):
    img = NetImage()
    img.create(width, height)
    img.fill(value)
    return img


def _filled(img):
    return {
        (x, y)
        for y in range(img.height)
        for x in range(img.width)
        if img.pixel(x, y) == 255
    }


def _values(img):
    return {img.pixel(x, y) for y in range(img.height) for x in range(img.width)}


def test_empty_polygon_clears_image():
    img = _image(4, 4)
    draw_polygon(img, [])
    assert _values(img) == {0}


def test_rectangle_filled_inclusively():
    img = _image(8, 6)
    draw_polygon(img, [(1, 1), (5, 1), (5, 4), (1, 4)])
    expected = {(x, y) for y in range(1, 5) for x in range(1, 6)}
    assert _filled(img) == expected
    assert _values(img) == {0, 255}


def test_polygon_below_image_draws_nothing():
    img = _image(5, 5)
    draw_polygon(img, [(0, 10), (4, 10), (4, 20), (0, 20)])
    assert _values(img) == {0}


def test_polygon_above_image_draws_nothing():
    img = _image(5, 5)
    draw_polygon(img, [(0, -10), (4, -10), (4, -2), (0, -2)])
    assert _values(img) == {0}


def test_wide_polygon_is_clipped_to_image():
    img = _image(8, 4)
    draw_polygon(img, [(-3, -2), (20, -2), (20, 10), (-3, 10)])
    assert _values(img) == {255}


def test_fill_is_contained_in_bounding_box():
    img = _image(12, 12)
    points = [(2, 3), (9, 2), (10, 8), (4, 10)]
    draw_polygon(img, points)
    filled = _filled(img)
    assert filled
    xs = [x for x, _ in points]
    ys = [y for _, y in points]
    assert all(min(xs) <= x <= max(xs) and min(ys) <= y <= max(ys) for x, y in filled)


def test_stride_padding_is_cleared_and_not_painted():
    backing = bytearray([9] * 12)
    img = NetImage()
    img.create_map(3, 3, 4, backing)
    draw_polygon(img, [(-5, -5), (10, -5), (10, 10), (-5, 10)])
    assert backing[3] == 0 and backing[7] == 0
    assert _values(img) == {255}