"""
Point-cloud renderer: numpy splatting of particle positions into an image.

Takes the flat position buffers the engine hands to its sinks and returns
an (H, W, 4) RGBA uint8 array suitable for display in a QImage.

Views:
  - "side":    x along the image, y up; depth (z) shades each point
  - "section": the pipe cross-section, z across, y up; depth (x) shades
"""

from __future__ import annotations

from typing import Mapping, Tuple

import numpy as np

from .params import LAYERS, RGB, PipeGeometry

VIEWS = ("side", "section")

# Lower layer first so the upper cloud sits on top where they overlap.
DRAW_ORDER = tuple(reversed(LAYERS))


def _view_window(geometry: PipeGeometry, view: str, width: int, height: int):
    """World-space window (u0, u1, v0, v1) mapped onto the image."""
    R = geometry.radius
    margin = 1.15
    if view == "side":
        half = geometry.half_length
        return -half, half, -R * margin, R * margin
    # Keep the cross-section round whatever the image aspect.
    aspect = width / max(height, 1)
    return -R * margin * aspect, R * margin * aspect, -R * margin, R * margin


def _to_pixels(u, v, window, width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
    u0, u1, v0, v1 = window
    px = ((u - u0) / (u1 - u0) * (width - 1)).round().astype(np.int64)
    py = ((1.0 - (v - v0) / (v1 - v0)) * (height - 1)).round().astype(np.int64)
    return px, py


def _draw_pipe(img: np.ndarray, geometry: PipeGeometry, view: str, window, wall: RGB) -> None:
    h, w = img.shape[:2]
    R = geometry.radius
    wall_rgb = np.array(wall, dtype=np.uint8)
    if view == "side":
        u = np.linspace(window[0], window[1], w)
        for v in (-R, R):
            px, py = _to_pixels(u, np.full_like(u, v), window, w, h)
            img[py, px, :3] = wall_rgb
        # Dashed interface line
        px, py = _to_pixels(u, np.zeros_like(u), window, w, h)
        dashes = (np.arange(w) // 6) % 2 == 0
        img[py[dashes], px[dashes], :3] = wall_rgb // 2
    else:
        theta = np.linspace(0.0, 2.0 * np.pi, max(64, 4 * (w + h)))
        px, py = _to_pixels(R * np.cos(theta), R * np.sin(theta), window, w, h)
        ok = (px >= 0) & (px < w) & (py >= 0) & (py < h)
        img[py[ok], px[ok], :3] = wall_rgb
        z = np.linspace(-R, R, w)
        px, py = _to_pixels(z, np.zeros_like(z), window, w, h)
        ok = (px >= 0) & (px < w)
        dashes = ((np.arange(w) // 6) % 2 == 0) & ok
        img[py[dashes], px[dashes], :3] = wall_rgb // 2


def render_frame(
    positions: Mapping[str, np.ndarray],
    colors: Mapping[str, RGB],
    geometry: PipeGeometry,
    width: int = 800,
    height: int = 240,
    view: str = "side",
    background: RGB = (12, 14, 18),
    wall: RGB = (120, 130, 140),
    point_size: int = 2,
) -> np.ndarray:
    """Render one frame → (height, width, 4) uint8 RGBA array.

    Parameters:
        positions:  Flat (x, y, z) buffers keyed by layer name.
        colors:     RGB per layer name.
        geometry:   Pipe dimensions (sets the view window).
        width:      Output width in pixels.
        height:     Output height in pixels.
        view:       "side" or "section".
        point_size: Splat edge length in pixels.
    """
    if view not in VIEWS:
        raise ValueError(f"Unknown view '{view}'. Expected one of: {', '.join(VIEWS)}")

    img = np.zeros((height, width, 4), dtype=np.uint8)
    img[..., :3] = np.array(background, dtype=np.uint8)
    img[..., 3] = 255

    window = _view_window(geometry, view, width, height)
    _draw_pipe(img, geometry, view, window, wall)

    for layer in DRAW_ORDER:
        if layer not in positions:
            continue
        pts = np.asarray(positions[layer]).reshape(-1, 3)
        if pts.shape[0] == 0:
            continue

        if view == "side":
            u, v, depth = pts[:, 0], pts[:, 1], pts[:, 2]
            depth01 = (depth / geometry.radius + 1.0) * 0.5
        else:
            u, v, depth = pts[:, 2], pts[:, 1], pts[:, 0]
            depth01 = depth / geometry.length + 0.5
        depth01 = np.clip(depth01, 0.0, 1.0)

        px, py = _to_pixels(u, v, window, width, height)

        # Fake depth: nearer points are brighter
        shade = (0.45 + 0.55 * depth01)[:, np.newaxis]
        rgb = np.clip(np.array(colors[layer], dtype=np.float64) * shade, 0, 255).astype(np.uint8)

        # Far points first so near points win the overwrite
        order = np.argsort(depth01, kind="stable")
        px, py, rgb = px[order], py[order], rgb[order]

        for dy in range(point_size):
            for dx in range(point_size):
                sx = px + dx
                sy = py + dy
                ok = (sx >= 0) & (sx < width) & (sy >= 0) & (sy < height)
                img[sy[ok], sx[ok], :3] = rgb[ok]

    return img
