import numpy as np
import pytest

from conftest import solid

from pixel_tile.constants import BLACK, COLOUR_COUNTS, WHITE
from pixel_tile.core_types import Raster, new_grid
from pixel_tile.errors import InvalidColourCountError
from pixel_tile.palette import (
    create_diverse_palette,
    extract_palette,
    palette_from_grid,
    palette_has_contrast,
)
from pixel_tile.palette.extract import adaptive_palette, levels_for_count


def _strip(colours_and_counts):
    """Row of pixels holding each colour `count` times, in order."""
    rows = []
    for rgb, count in colours_and_counts:
        rows.extend([rgb] * count)
    arr = np.array(rows, dtype=np.uint8).reshape(1, -1, 3)
    return Raster.from_array(arr)


@pytest.mark.parametrize("k", COLOUR_COUNTS)
def test_palette_never_exceeds_k(noisy_raster, k):
    palette = extract_palette(noisy_raster, k)
    assert 1 <= len(palette) <= k


@pytest.mark.parametrize("k", [4, 8, 16])
def test_small_palettes_carry_black_and_white(midtone_raster, k):
    palette = extract_palette(midtone_raster, k)
    assert len(palette) <= k
    assert palette_has_contrast(palette)


@pytest.mark.parametrize("k", [2, 16, 64, 256])
def test_extraction_is_deterministic(noisy_raster, k):
    assert extract_palette(noisy_raster, k) == extract_palette(noisy_raster, k)


def test_solid_red_square_two_colours():
    palette = extract_palette(solid(100, 100, (255, 0, 0, 255)), 2)
    assert len(palette) == 2
    dark, light = palette
    # uniform luminance puts every pixel on one side of the split
    assert dark != light
    assert dark[1:] == (0, 0)
    assert light[0] == 255
    assert sum(dark) < sum(light)


def test_two_colour_split_pushes_anchors_apart():
    raster = _strip([((100, 100, 100), 10), ((150, 150, 150), 10)])
    dark, light = extract_palette(raster, 2)
    assert dark == (40, 40, 40)
    assert light == (210, 210, 210)


def test_few_buckets_returned_whole_with_anchors():
    raster = _strip([((255, 0, 0), 12), ((0, 0, 255), 4)])
    assert extract_palette(raster, 4) == [(255, 0, 0), (0, 0, 255), BLACK, WHITE]


def test_top_k_by_frequency_then_anchors_replace_least_frequent():
    raster = _strip(
        [
            ((255, 0, 0), 40),
            ((0, 255, 0), 30),
            ((0, 0, 255), 20),
            ((255, 255, 0), 10),
            ((0, 255, 255), 5),
            ((255, 0, 255), 3),
        ]
    )
    palette = extract_palette(raster, 4)
    assert palette == [(255, 0, 0), (0, 255, 0), WHITE, BLACK]


def test_bucket_colour_is_the_mean_of_its_pixels():
    # both colours fall in the same 3-level bucket
    raster = _strip([((10, 10, 10), 1), ((20, 20, 20), 1)])
    palette = extract_palette(raster, 8)
    assert palette[0] == (15, 15, 15)


def test_transparent_raster_uses_synthetic_palette():
    raster = solid(8, 8, (200, 10, 10, 0))
    assert extract_palette(raster, 8) == create_diverse_palette(8)


def test_rejects_non_positive_count(noisy_raster):
    with pytest.raises(InvalidColourCountError):
        extract_palette(noisy_raster, 0)


def test_levels_for_count():
    assert [levels_for_count(k) for k in (4, 8, 16, 32, 48)] == [3, 3, 4, 5, 6]


@pytest.mark.parametrize("k", [1, 2, 3, 8, 16, 64, 128, 256])
def test_diverse_palette_shape(k):
    palette = create_diverse_palette(k)
    assert 1 <= len(palette) <= k
    assert len(set(palette)) == len(palette)
    assert palette[0] == BLACK
    if k >= 2:
        assert palette[1] == WHITE


def test_diverse_palette_fills_small_and_medium_counts():
    assert len(create_diverse_palette(16)) == 16
    assert len(create_diverse_palette(128)) == 128


def test_palette_from_grid_lists_visible_cells_first_seen():
    grid = new_grid()
    grid[0, 3] = (1, 2, 3, 255)
    grid[5, 0] = (9, 9, 9, 255)
    grid[6, 6] = (1, 2, 3, 255)
    grid[7, 7] = (4, 4, 4, 10)
    assert palette_from_grid(grid) == [(1, 2, 3, 255), (9, 9, 9, 255)]


def _grays(values_and_counts):
    rows = []
    for v, count in values_and_counts:
        rows.extend([(v, v, v)] * count)
    return np.array(rows, dtype=np.uint8)


@pytest.mark.parametrize("k", [64, 128])
def test_medium_counts_keep_buckets_without_anchors(k):
    raster = _strip([((255, 0, 0), 30), ((0, 0, 255), 10)])
    assert extract_palette(raster, k) == [(255, 0, 0), (0, 0, 255)]


def test_medium_counts_bucket_on_a_16_step_grid():
    raster = _strip([((40, 40, 40), 3), ((50, 50, 50), 2)])
    assert extract_palette(raster, 64) == [(40, 40, 40), (50, 50, 50)]
    # a coarser grid merges the two
    assert extract_palette(raster, 32)[0] == (44, 44, 44)


def test_solid_raster_at_256_is_padded_to_full_size():
    palette = extract_palette(solid(20, 20, (200, 40, 90, 255)), 256)
    assert len(palette) == 256
    assert len(set(palette)) == 256
    assert palette[0] == (200, 40, 90)
    # gray ramp in steps of 5 comes before the hue sweep
    assert palette[1:4] == [(0, 0, 0), (5, 5, 5), (10, 10, 10)]
    assert (250, 250, 250) in palette


def test_adaptive_keeps_top_share_and_filters_the_rest():
    px = _grays([(100, 6), (101, 5), (102, 4), (103, 3), (104, 2), (105, 1)])
    # 100 and 101 are kept outright; 102..105 sit too close to them in HSL
    palette = adaptive_palette(px, 4, sample=px)
    assert palette == [(100, 100, 100), (101, 101, 101), (0, 0, 0), (127, 127, 127)]


def test_adaptive_accepts_distinct_remaining_buckets():
    px = _grays([(0, 5), (42, 4), (210, 1)])
    assert adaptive_palette(px, 3, sample=px) == [(0, 0, 0), (42, 42, 42), (210, 210, 210)]
