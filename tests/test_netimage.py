import pytest

from platescan.netimage import NetImage


def test_create_sets_geometry():
    img = NetImage()
    img.create(3, 2)
    assert (img.width, img.height, img.scanline) == (3, 2, 3)
    assert len(img.data) == img.scanline * img.height
    assert img.is_mapped is False


def test_fill_sets_every_pixel():
    img = NetImage()
    img.create(4, 3)
    img.fill(9)
    assert {img.pixel(x, y) for y in range(3) for x in range(4)} == {9}


def test_create_map_uses_stride():
    backing = bytearray(range(8))
    img = NetImage()
    img.create_map(3, 2, 4, backing)
    assert img.offset(0, 1) == img.scanline
    assert bytes(img.row(1)) == bytes(backing[4:7])
    assert img.pixel(2, 1) == backing[6]
    assert img.is_mapped is True


def test_mapped_image_shares_memory():
    backing = bytearray(6)
    img = NetImage()
    img.create_map(3, 2, 3, backing)
    backing[0] = 200
    assert img.pixel(0, 0) == 200
    img.fill(5)
    assert backing == bytearray([5] * 6)


def test_row_is_writable():
    img = NetImage()
    img.create(3, 2)
    img.row(1)[:] = b"\x01\x02\x03"
    assert [img.pixel(x, 1) for x in range(3)] == [1, 2, 3]
    assert [img.pixel(x, 0) for x in range(3)] == [0, 0, 0]


def test_free_resets():
    img = NetImage()
    img.create(2, 2)
    img.free()
    assert (img.width, img.height, img.scanline, img.data) == (0, 0, 0, None)
    with pytest.raises(ValueError):
        img.pixel(0, 0)


def test_create_after_map_owns_new_memory():
    backing = bytearray(4)
    img = NetImage()
    img.create_map(2, 2, 2, backing)
    img.create(2, 2)
    img.fill(7)
    assert img.is_mapped is False
    assert backing == bytearray(4)


def test_smaller_create_reuses_buffer():
    img = NetImage()
    img.create(4, 4)
    store = img.data
    img.create(2, 3)
    assert img.data is store
    assert (img.width, img.height, img.scanline) == (2, 3, 2)


def test_create_map_rejects_short_buffer():
    with pytest.raises(ValueError):
        NetImage().create_map(4, 4, 4, bytearray(10))


def test_create_rejects_negative_size():
    with pytest.raises(ValueError):
        NetImage().create(-1, 3)