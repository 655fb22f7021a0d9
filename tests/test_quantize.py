import numpy as np
import pytest

from conftest import solid

from pixel_tile.core_types import Raster
from pixel_tile.editor import PixelEditor
from pixel_tile.errors import InvalidColourCountError
from pixel_tile.palette import create_diverse_palette
from pixel_tile.quantize import apply_palette, dither_floyd_steinberg, map_nearest, pixelate
from pixel_tile.quantize.dither import KERNEL_FS, diffuse_error

BW = np.array([[0, 0, 0], [255, 255, 255]], dtype=np.uint8)


def _rgb_set(grid):
    return {tuple(row) for row in grid.reshape(-1, 4)[:, :3].tolist()}


def test_dark_gray_maps_to_black():
    px = np.array([[[10, 10, 10, 255]]], dtype=np.uint8)
    out = map_nearest(px, BW)
    assert out[0, 0].tolist() == [0, 0, 0, 255]


def test_nearest_mapping_uses_only_palette_colours(noisy_raster):
    pal = np.array(create_diverse_palette(16), dtype=np.uint8)
    out = map_nearest(np.array(noisy_raster.pixels), pal)
    allowed = {tuple(c) for c in pal.tolist()}
    assert _rgb_set(out) <= allowed


def test_kernel_weights_sum_to_one():
    assert sum(w for _, _, w in KERNEL_FS) == pytest.approx(1.0)


def test_interior_diffusion_conserves_error():
    work = np.full((3, 3, 4), 128.0)
    err = np.array([16.0, -32.0, 8.0])
    diffuse_error(work, 1, 1, err)
    gained = work[..., :3].sum(axis=(0, 1)) - 128.0 * 9
    assert gained.tolist() == pytest.approx(err.tolist())
    # alpha is never touched
    assert np.all(work[..., 3] == 128.0)


def test_diffusion_targets_only_unvisited_neighbours():
    work = np.zeros((3, 3, 4))
    diffuse_error(work, 1, 1, np.array([16.0, 16.0, 16.0]))
    assert work[1, 2, 0] == pytest.approx(7.0)
    assert work[2, 0, 0] == pytest.approx(3.0)
    assert work[2, 1, 0] == pytest.approx(5.0)
    assert work[2, 2, 0] == pytest.approx(1.0)
    assert np.all(work[0, :, :3] == 0.0)
    assert work[1, 0, 0] == 0.0


def test_diffusion_from_corner_is_dropped():
    work = np.full((2, 2, 4), 100.0)
    diffuse_error(work, 1, 1, np.array([50.0, 50.0, 50.0]))
    assert np.all(work == 100.0)


def test_diffusion_clamps_working_values():
    work = np.full((2, 2, 4), 250.0)
    diffuse_error(work, 0, 0, np.array([200.0, -1000.0, 0.0]))
    assert work[0, 1, 0] == 255.0
    assert work[0, 1, 1] == 0.0


def test_dither_mixes_black_and_white_for_mid_gray():
    rgba = np.full((16, 16, 4), 128, dtype=np.uint8)
    rgba[..., 3] = 255
    out = dither_floyd_steinberg(rgba, BW)
    assert _rgb_set(out) == {(0, 0, 0), (255, 255, 255)}


def test_dither_copies_alpha():
    rgba = np.full((4, 4, 4), 90, dtype=np.uint8)
    rgba[:, :2, 3] = 0
    rgba[:, 2:, 3] = 255
    out = dither_floyd_steinberg(rgba, BW)
    assert np.array_equal(out[..., 3], rgba[..., 3])


def test_apply_palette_large_palette_stays_in_palette(noisy_raster):
    palette = create_diverse_palette(128)
    grid = apply_palette(noisy_raster, palette)
    assert grid.shape == (16, 16, 4)
    assert _rgb_set(grid) <= set(palette)


def test_apply_palette_empty_palette_falls_back_to_black_and_white(noisy_raster):
    grid = apply_palette(noisy_raster, [])
    assert _rgb_set(grid) <= {(0, 0, 0), (255, 255, 255)}


def test_apply_palette_keeps_transparent_cells():
    arr = np.zeros((16, 16, 4), dtype=np.uint8)
    arr[..., :3] = (200, 40, 40)
    arr[:, 8:, 3] = 255
    grid = apply_palette(Raster.from_array(arr), [(0, 0, 0), (255, 0, 0)])
    assert np.all(grid[:, :8, 3] == 0)
    assert np.all(grid[:, 8:, 3] == 255)


def test_transparent_cells_are_cleared_so_one_fill_covers_them():
    rng = np.random.default_rng(7)
    arr = np.zeros((64, 64, 4), dtype=np.uint8)
    arr[..., :3] = rng.integers(1, 256, size=(64, 64, 3), dtype=np.uint8)
    arr[16:48, 16:48, 3] = 255
    result = pixelate(Raster.from_array(arr), 256)
    assert result.dithered

    border = result.grid[..., 3] == 0
    assert int(np.count_nonzero(border)) == 192
    assert np.all(result.grid[border] == 0)

    editor = PixelEditor(result.grid)
    editor.select_colour((0, 255, 0))
    assert editor.flood_fill(0, 0)
    assert np.all(editor.grid[border] == (0, 255, 0, 255))
    assert np.array_equal(editor.grid[~border], result.grid[~border])


def test_pixelate_downsamples_and_respects_k(noisy_raster):
    result = pixelate(noisy_raster, 8)
    assert result.grid.shape == (16, 16, 4)
    assert result.grid.dtype == np.uint8
    assert len(result.palette) <= 8
    assert not result.dithered
    assert _rgb_set(result.grid) <= set(result.palette)


def test_pixelate_with_given_palette_truncates_to_k():
    result = pixelate(solid(40, 40, (10, 10, 10, 255)), 2, palette=[(0, 0, 0), (255, 255, 255), (9, 9, 9)])
    assert result.palette == [(0, 0, 0), (255, 255, 255)]
    assert _rgb_set(result.grid) == {(0, 0, 0)}


def test_pixelate_large_k_is_dithered(noisy_raster):
    result = pixelate(noisy_raster, 256)
    assert result.dithered == (len(result.palette) >= 128)
    assert _rgb_set(result.grid) <= set(result.palette)


def test_pixelate_rejects_zero(noisy_raster):
    with pytest.raises(InvalidColourCountError):
        pixelate(noisy_raster, 0)
