"""
utils.py
--------------------
Pixel helpers shared by the pipeline stages.
Only numpy + Pillow.

All stage buffers are (H, W, 4) uint8 RGBA with straight (non-premultiplied)
alpha. Overlays are composited with the usual source-over operator.
"""

from __future__ import annotations

import numpy as np


def _clip(arr: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(arr), 0, 255).astype(np.uint8)


def composite_over(
    buf: np.ndarray,
    rgb: np.ndarray | tuple[float, float, float],
    alpha: np.ndarray | float,
    origin: tuple[int, int] = (0, 0),
) -> np.ndarray:
    """Source-over composite a colour layer onto ``buf`` in place.

    Args:
        buf:    (H, W, 4) uint8 RGBA buffer owned by the caller.
        rgb:    layer colour, (h, w, 3) / (h, 1, 3) array or one RGB triple,
                values in [0, 255].
        alpha:  layer opacity, (h, w) / (h, 1) array or scalar in [0, 1].
        origin: (x, y) of the layer's top-left corner inside ``buf``. The
                layer must lie inside the buffer.

    Returns:
        ``buf``, for chaining.
    """
    x0, y0 = origin
    alpha = np.asarray(alpha, dtype=np.float32)
    rgb = np.asarray(rgb, dtype=np.float32)
    if alpha.ndim == 2:
        h, w = alpha.shape
        if w == 1:
            w = buf.shape[1] - x0
    else:
        h, w = buf.shape[0] - y0, buf.shape[1] - x0

    region = buf[y0:y0 + h, x0:x0 + w]
    dst = region.astype(np.float32)
    src_a = np.broadcast_to(alpha, (h, w))[..., np.newaxis]
    dst_a = dst[..., 3:4] / 255.0

    out_a = src_a + dst_a * (1.0 - src_a)
    num = rgb * src_a + dst[..., :3] * dst_a * (1.0 - src_a)
    safe = np.where(out_a > 0, out_a, 1.0)
    out_rgb = np.where(out_a > 0, num / safe, 0.0)

    region[..., :3] = _clip(out_rgb)
    region[..., 3] = _clip(out_a[..., 0] * 255.0)
    return buf


def flatten(buf: np.ndarray, background: tuple[int, int, int] = (0, 0, 0)) -> np.ndarray:
    """Drop alpha by compositing an RGBA buffer over an opaque background."""
    a = buf[..., 3:4].astype(np.float32) / 255.0
    bg = np.asarray(background, dtype=np.float32)
    out = buf[..., :3].astype(np.float32) * a + bg * (1.0 - a)
    return _clip(out)
