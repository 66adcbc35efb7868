"""
Radial-gradient sprite textures and their cache.

Textures are RGBA float32 images (values in [0, 1]) rendered on the CPU
with numpy. Nebula and dust sprites request a texture for their color and
softness; the cache quantizes softness to one decimal so that thousands
of sprites share a handful of images.
"""

import math
import threading
from collections import namedtuple
from typing import Optional

import numpy as np

from galorb import constants as const

# Gradient stops: (offset in [0, 1] of the radius, alpha)
# Soft (nebula) alphas are scaled by the quantized softness
SOFT_PROFILE = ((0.0, 0.4), (0.2, 0.25), (0.5, 0.1), (0.8, 0.03), (1.0, 0.0))
DARK_PROFILE = ((0.0, 0.6), (0.3, 0.35), (0.6, 0.1), (1.0, 0.0))

# Sun glow: (offset, (r, g, b) 0-255, alpha)
GLOW_PROFILE = (
    (0.0, (255, 200, 50), 1.0),
    (0.2, (255, 150, 0), 0.6),
    (0.5, (255, 100, 0), 0.2),
    (1.0, (255, 50, 0), 0.0),
)

TextureKey = namedtuple('TextureKey', ['color', 'softness', 'is_dark'])


def hex_to_rgb(hex_color: int) -> np.ndarray:
    """
    Split a 24-bit 0xRRGGBB integer into an (r, g, b) float array in [0, 1].

    Channels are the raw hex bytes divided by 255, i.e. sRGB-encoded values
    with no conversion to linear light. lerp_colors therefore blends in sRGB
    space; a renderer working in linear space must convert these first.
    """
    hex_color = int(hex_color)
    return np.array([
        (hex_color >> 16) & 255,
        (hex_color >> 8) & 255,
        hex_color & 255,
    ], dtype=np.float64) / 255.0


def lerp_colors(color_a: np.ndarray, color_b: np.ndarray, t) -> np.ndarray:
    """
    Linearly interpolate between two RGB colors.

    Written as (1 - t) a + t b so that t = 0 and t = 1 reproduce the
    endpoints exactly.

    Args:
        color_a: (3,) RGB at t = 0
        color_b: (3,) RGB at t = 1
        t: scalar or (N,) array of weights

    Returns:
        (3,) or (N, 3) array of colors
    """
    t = np.asarray(t, dtype=np.float64)[..., np.newaxis]
    return (1.0 - t) * color_a + t * color_b


def quantize_softness(softness: float) -> float:
    """Round softness half-up to one decimal (0.61 and 0.64 both give 0.6)."""
    return math.floor(softness * 10.0 + 0.5) / 10.0


def make_texture_key(color: int, softness: float = 1.0, is_dark: bool = False) -> TextureKey:
    """Build the cache key for a texture request."""
    return TextureKey(int(color), quantize_softness(softness), bool(is_dark))


def _radial_distance(size: int) -> np.ndarray:
    """Distance of each pixel centre from the image centre, in units of size/2."""
    half = size / 2.0
    coords = np.arange(size, dtype=np.float64) + 0.5 - half
    xx, yy = np.meshgrid(coords, coords)
    return np.sqrt(xx**2 + yy**2) / half


def render_radial_gradient(size: int, rgb: np.ndarray, stops) -> np.ndarray:
    """
    Render a single-color radial gradient.

    Alpha is piecewise linear between the stops and holds the last stop's
    value beyond the outer radius (the image corners).

    Args:
        size: Image width and height in pixels
        rgb: (3,) color in [0, 1]
        stops: Sequence of (offset, alpha) pairs with increasing offsets

    Returns:
        (size, size, 4) float32 RGBA image
    """
    offsets = np.array([s[0] for s in stops])
    alphas = np.array([s[1] for s in stops])

    image = np.empty((size, size, 4), dtype=np.float32)
    image[..., :3] = rgb
    image[..., 3] = np.interp(_radial_distance(size), offsets, alphas)
    return image


def create_glow_texture(size: int = const.GLOW_TEXTURE_SIZE) -> np.ndarray:
    """Render the Sun's orange glow sprite (color varies along the radius)."""
    offsets = np.array([s[0] for s in GLOW_PROFILE])
    colors = np.array([s[1] for s in GLOW_PROFILE], dtype=np.float64) / 255.0
    alphas = np.array([s[2] for s in GLOW_PROFILE])

    d = _radial_distance(size)
    image = np.empty((size, size, 4), dtype=np.float32)
    for channel in range(3):
        image[..., channel] = np.interp(d, offsets, colors[:, channel])
    image[..., 3] = np.interp(d, offsets, alphas)
    return image


class TextureCache:
    """
    Memoizes gradient textures by (color, quantized softness, is_dark).

    Entries are created at most once per key and kept for the lifetime of
    the cache; there is no eviction. Returned images are read-only since
    they are shared between sprites.

    Access is expected from a single thread. Pass a lock (or
    thread_safe=True) when the cache is shared so that inserts are
    serialized.
    """

    def __init__(self, size: int = const.TEXTURE_SIZE, thread_safe: bool = False,
                 lock: Optional[threading.Lock] = None):
        self.size = size
        self._textures = {}
        self._lock = lock if lock is not None else (threading.Lock() if thread_safe else None)
        self.hits = 0
        self.misses = 0

    def acquire(self, color: int, softness: float = 1.0, is_dark: bool = False) -> TextureKey:
        """
        Ensure the texture for a request exists and return its key.

        Args:
            color: 24-bit 0xRRGGBB color
            softness: Gradient falloff scale (ignored by the dark profile)
            is_dark: Use the dust profile instead of the nebula profile

        Returns:
            TextureKey under which the image is cached
        """
        key = make_texture_key(color, softness, is_dark)

        if key in self._textures:
            self.hits += 1
            return key

        if self._lock is None:
            self._insert(key)
        else:
            with self._lock:
                if key in self._textures:
                    self.hits += 1
                    return key
                self._insert(key)

        return key

    def _insert(self, key: TextureKey) -> None:
        rgb = hex_to_rgb(key.color)
        if key.is_dark:
            stops = DARK_PROFILE
        else:
            stops = tuple((offset, alpha * key.softness) for offset, alpha in SOFT_PROFILE)

        image = render_radial_gradient(self.size, rgb, stops)
        image.setflags(write=False)
        self._textures[key] = image
        self.misses += 1

    def get_texture(self, color: int, softness: float = 1.0, is_dark: bool = False) -> np.ndarray:
        """Fetch (creating if needed) the gradient image for a request."""
        return self._textures[self.acquire(color, softness, is_dark)]

    def __getitem__(self, key: TextureKey) -> np.ndarray:
        return self._textures[key]

    def __contains__(self, key) -> bool:
        return key in self._textures

    def __len__(self) -> int:
        return len(self._textures)

    def keys(self):
        return list(self._textures.keys())

    def clear(self) -> None:
        """Drop every entry (used when a scene is torn down)."""
        self._textures.clear()
        self.hits = 0
        self.misses = 0

    def __repr__(self) -> str:
        return f"TextureCache({len(self)} textures, {self.hits} hits, {self.misses} misses)"
