# pixel_tile/palette/fallback.py
from __future__ import annotations

"""
Deterministic synthetic palettes.

Used when extraction fails or the image has nothing usable to extract from.
Every palette starts with black and white and never repeats a colour.
"""

from typing import Iterable, List, Sequence, Set

from ..colour_convert import hsl_to_rgb, rgb_to_hsl
from ..constants import BLACK, WHITE
from ..core_types import Palette, RGBTuple

# Named hues for the 128-colour palette; each also gets a darker and lighter variant.
NAMED_HUES: List[RGBTuple] = [
    (255, 0, 0),  # red
    (255, 128, 0),  # orange
    (255, 255, 0),  # yellow
    (128, 255, 0),  # lime
    (0, 255, 0),  # green
    (0, 255, 128),  # spring green
    (0, 255, 255),  # cyan
    (0, 128, 255),  # azure
    (0, 0, 255),  # blue
    (128, 0, 255),  # violet
    (255, 0, 255),  # magenta
    (255, 0, 128),  # rose
]

PRIMARIES: List[RGBTuple] = [(255, 0, 0), (0, 255, 0), (0, 0, 255)]
SECONDARIES: List[RGBTuple] = [(255, 255, 0), (0, 255, 255), (255, 0, 255)]
TERTIARIES: List[RGBTuple] = [
    (255, 128, 0),
    (128, 255, 0),
    (0, 255, 128),
    (0, 128, 255),
    (128, 0, 255),
    (255, 0, 128),
]
SMALL_GRAYS: List[RGBTuple] = [(128, 128, 128), (192, 192, 192), (64, 64, 64)]


class PaletteBuilder:
    """Ordered, duplicate-free colour list with a hard size cap."""

    def __init__(self, cap: int, seed: Iterable[RGBTuple] = ()) -> None:
        self.cap = int(cap)
        self.colours: List[RGBTuple] = []
        self._seen: Set[RGBTuple] = set()
        for c in seed:
            self.push(c)

    def __len__(self) -> int:
        return len(self.colours)

    @property
    def full(self) -> bool:
        return len(self.colours) >= self.cap

    def push(self, rgb: Sequence[int]) -> bool:
        """Append rgb unless the builder is full or already holds it."""
        key = (int(rgb[0]), int(rgb[1]), int(rgb[2]))
        if self.full or key in self._seen:
            return False
        self.colours.append(key)
        self._seen.add(key)
        return True

    def has_close(self, rgb: Sequence[int], tolerance: int) -> bool:
        """True if an existing entry is within tolerance on every channel."""
        for er, eg, eb in self.colours:
            if (
                abs(er - rgb[0]) < tolerance
                and abs(eg - rgb[1]) < tolerance
                and abs(eb - rgb[2]) < tolerance
            ):
                return True
        return False

    def result(self) -> Palette:
        return list(self.colours[: self.cap])


def _diverse_256(builder: PaletteBuilder) -> None:
    # 18 hues x 3 saturations x 3 lightness levels
    for h in range(0, 360, 20):
        for s in (100, 75, 50):
            for l in (25, 50, 75):
                builder.push(hsl_to_rgb(h, s, l))

    for gray in range(10, 250, 10):
        builder.push((gray, gray, gray))

    for rgb in PRIMARIES + SECONDARIES:
        builder.push(rgb)

    for h in range(10, 360, 20):
        if builder.full:
            break
        builder.push(hsl_to_rgb(h, 100, 50))


def _diverse_128(builder: PaletteBuilder) -> None:
    # 24 hues x 4 saturations x 3 lightness levels, capped by the builder
    for h in range(0, 360, 15):
        for s in (100, 80, 60, 40):
            for l in (30, 50, 70):
                builder.push(hsl_to_rgb(h, s, l))

    for rgb in NAMED_HUES:
        if builder.full:
            break
        builder.push(rgb)
        h, s, l = rgb_to_hsl(*rgb)
        if l > 20:
            builder.push(hsl_to_rgb(h, s, max(10.0, l - 20.0)))
        if l < 80:
            builder.push(hsl_to_rgb(h, s, min(90.0, l + 20.0)))

    for gray in range(15, 241, 15):
        builder.push((gray, gray, gray))

    for h in range(0, 360, 30):
        for s in (90, 70, 50, 30):
            for l in (25, 50, 75):
                rgb = hsl_to_rgb(h, s, l)
                if not builder.has_close(rgb, 8):
                    builder.push(rgb)


def _diverse_small(builder: PaletteBuilder) -> None:
    for rgb in PRIMARIES + SECONDARIES + TERTIARIES + SMALL_GRAYS:
        builder.push(rgb)

    remaining = builder.cap - len(builder)
    if remaining <= 0:
        return
    hue_step = 360.0 / remaining
    hue = 0.0
    while hue < 360.0 and not builder.full:
        builder.push(hsl_to_rgb(hue, 100, 50))
        hue += hue_step


def create_diverse_palette(count: int) -> Palette:
    """
    Synthetic palette of at most `count` colours, black and white first.

    count >= 256 : HSL grid + gray ramp + primaries + hue sweep
    count >= 128 : denser HSL grid + named hues with variants + grays + filtered sweep
    otherwise    : primaries, secondaries, tertiaries, grays, evenly spaced hues
    """
    count = int(count)
    builder = PaletteBuilder(max(1, count), seed=[BLACK, WHITE])
    if count <= 2:
        return builder.result()

    if count >= 256:
        _diverse_256(builder)
    elif count >= 128:
        _diverse_128(builder)
    else:
        _diverse_small(builder)
    return builder.result()


__all__ = ["PaletteBuilder", "create_diverse_palette"]
