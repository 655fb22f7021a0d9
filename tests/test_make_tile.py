import numpy as np

from conftest import png_bytes

import make_tile
from pixel_tile.image_io import load_raster


def _write_image(path, rgb=(200, 30, 30)):
    arr = np.empty((40, 30, 3), dtype=np.uint8)
    arr[...] = rgb
    arr[:10] = (20, 20, 220)
    path.write_bytes(png_bytes(arr))
    return path


def test_writes_tile_and_preview(tmp_path, capsys):
    src = _write_image(tmp_path / "photo.png")
    assert make_tile.main([str(src), "--colors", "4", "--preview"]) == 0

    tile = load_raster(tmp_path / "photo_tile.png")
    preview = load_raster(tmp_path / "photo_preview.png")
    assert (tile.width, tile.height) == (16, 16)
    assert (preview.width, preview.height) == (256, 256)
    out = capsys.readouterr().out
    assert "Wrote photo_tile.png" in out
    assert "Colours used:" in out


def test_explicit_output_path_and_crop(tmp_path):
    src = _write_image(tmp_path / "in.png")
    dst = tmp_path / "out.png"
    assert make_tile.main([str(src), str(dst), "--crop", "--background", "#ffffff"]) == 0
    assert load_raster(dst).width == 16


def test_folder_skips_previous_outputs(tmp_path):
    _write_image(tmp_path / "a.png")
    _write_image(tmp_path / "b_tile.png")
    assert make_tile.main([str(tmp_path), "--colors", "2"]) == 0
    assert (tmp_path / "a_tile.png").exists()
    assert not (tmp_path / "b_tile_tile.png").exists()


def test_missing_input_exits_with_2(tmp_path, capsys):
    assert make_tile.main([str(tmp_path / "nope.png")]) == 2
    assert "not found" in capsys.readouterr().err


def test_bad_background_exits_with_2(tmp_path):
    src = _write_image(tmp_path / "in.png")
    assert make_tile.main([str(src), "--background", "#zz"]) == 2


def test_undecodable_input_reports_failure(tmp_path):
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"nope")
    assert make_tile.main([str(bad)]) == 1
