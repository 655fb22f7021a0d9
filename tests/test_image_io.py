import numpy as np
import pytest

from conftest import png_bytes, solid

from pixel_tile.core_types import Raster, new_grid
from pixel_tile.errors import InvalidImageError
from pixel_tile.image_io import (
    apply_background,
    crop_square,
    decode_image,
    encode_png,
    load_raster,
    magnify,
    resize_to_grid,
    save_grid_png,
)


def test_raster_from_rgb_array_gets_opaque_alpha():
    raster = Raster.from_array(np.zeros((3, 5, 3), dtype=np.uint8))
    assert (raster.width, raster.height) == (5, 3)
    assert np.all(raster.alpha == 255)
    assert not raster.pixels.flags.writeable


def test_raster_rejects_zero_size_and_bad_buffers():
    with pytest.raises(InvalidImageError):
        Raster.from_array(np.zeros((0, 4, 4), dtype=np.uint8))
    with pytest.raises(InvalidImageError):
        Raster.from_bytes(2, 2, b"\x00" * 15)
    with pytest.raises(InvalidImageError):
        Raster.from_bytes(0, 2, b"")


def test_raster_bytes_layout_is_row_major_rgba():
    data = bytes(range(2 * 3 * 4))
    raster = Raster.from_bytes(2, 3, data)
    assert raster.pixels[0, 1].tolist() == [4, 5, 6, 7]
    assert raster.to_bytes() == data


def test_decode_image_reads_png_bytes():
    arr = np.zeros((3, 5, 4), dtype=np.uint8)
    arr[...] = (1, 2, 3, 4)
    raster = decode_image(png_bytes(arr))
    assert (raster.width, raster.height) == (5, 3)
    assert raster.pixels[0, 0].tolist() == [1, 2, 3, 4]


def test_decode_image_rejects_garbage():
    with pytest.raises(InvalidImageError):
        decode_image(b"definitely not an image")


def test_load_raster_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_raster(tmp_path / "missing.png")


def test_load_raster_reads_files_and_rejects_junk(tmp_path):
    path = tmp_path / "in.png"
    path.write_bytes(png_bytes(np.full((4, 4, 3), 77, dtype=np.uint8)))
    raster = load_raster(path)
    assert raster.pixels[2, 2].tolist() == [77, 77, 77, 255]

    junk = tmp_path / "junk.png"
    junk.write_bytes(b"nope")
    with pytest.raises(InvalidImageError):
        load_raster(junk)


def test_resize_to_grid_area_average():
    arr = np.zeros((32, 32, 4), dtype=np.uint8)
    arr[..., 3] = 255
    arr[:, ::2, :3] = 200
    small = resize_to_grid(Raster.from_array(arr))
    assert (small.width, small.height) == (16, 16)
    # each 2x2 box holds two 200s and two 0s
    assert np.all(np.abs(small.pixels[..., 0].astype(int) - 100) <= 1)


def test_resize_to_grid_keeps_exact_size():
    raster = solid(16, 16, (5, 6, 7, 255))
    assert resize_to_grid(raster) is raster


def test_magnify_repeats_cells():
    grid = new_grid()
    grid[0, 0] = (255, 0, 0, 255)
    big = magnify(grid, 16)
    assert big.shape == (256, 256, 4)
    assert np.all(big[:16, :16] == (255, 0, 0, 255))
    assert np.all(big[16:, :] == 0)
    with pytest.raises(ValueError):
        magnify(grid, 0)


def test_encode_png_decodes_back():
    grid = new_grid((10, 20, 30, 255))
    grid[3, 4] = (0, 0, 0, 0)
    assert np.array_equal(decode_image(encode_png(grid)).pixels, grid)
    assert decode_image(encode_png(grid, scale=2)).width == 32


def test_save_grid_png_forces_png_suffix(tmp_path):
    written = save_grid_png(tmp_path / "tile.jpg", new_grid((1, 1, 1, 255)))
    assert written.suffix == ".png"
    assert written.exists()


def test_crop_square_centres_by_default():
    arr = np.zeros((6, 10, 4), dtype=np.uint8)
    arr[..., 3] = 255
    arr[:, 2, 0] = 99
    cropped = crop_square(Raster.from_array(arr))
    assert (cropped.width, cropped.height) == (6, 6)
    assert np.all(cropped.pixels[:, 0, 0] == 99)


def test_crop_square_with_box_and_bad_box():
    raster = solid(10, 10, (0, 0, 0, 255))
    assert crop_square(raster, (2, 3, 4, 4)).width == 4
    with pytest.raises(InvalidImageError):
        crop_square(raster, (20, 20, 4, 4))
    with pytest.raises(InvalidImageError):
        crop_square(raster, (0, 0, 0, 4))


def test_apply_background_fills_transparency():
    arr = np.zeros((2, 2, 4), dtype=np.uint8)
    arr[0, 0] = (10, 20, 30, 255)
    out = apply_background(Raster.from_array(arr), (255, 255, 255))
    assert out.pixels[0, 0].tolist() == [10, 20, 30, 255]
    assert out.pixels[1, 1].tolist() == [255, 255, 255, 255]
