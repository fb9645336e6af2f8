"""2D affine transforms and their decomposition into scale and rotation.

Glyphs stores a component's placement as separate ``pos``, ``angle``,
``scale`` and ``slant`` fields, while most font tooling uses a 6-coefficient
affine matrix. ``decompose`` and ``recompose`` map between the two.

Coefficient order follows the usual ``(xx, xy, yx, yy, dx, dy)`` layout:

    x' = x_scale * x + yx_scale * y + x_offset
    y' = xy_scale * x + y_scale * y + y_offset

Shear that cannot be expressed as rotation plus non-uniform scale is not
recovered by ``decompose``.
"""

import math
from typing import NamedTuple, Tuple

# Digits kept when recomposing, so that repeated round trips are stable.
PRECISION = 5


class AffineTransform(NamedTuple):
    x_scale: float = 1.0
    xy_scale: float = 0.0
    yx_scale: float = 0.0
    y_scale: float = 1.0
    x_offset: float = 0.0
    y_offset: float = 0.0


IDENTITY = AffineTransform()


def multiply(a: AffineTransform, b: AffineTransform) -> AffineTransform:
    """Compose two transforms: the result applies ``b`` first, then ``a``."""
    return AffineTransform(
        a[0] * b[0] + a[2] * b[1],
        a[1] * b[0] + a[3] * b[1],
        a[0] * b[2] + a[2] * b[3],
        a[1] * b[2] + a[3] * b[3],
        a[0] * b[4] + a[2] * b[5] + a[4],
        a[1] * b[4] + a[3] * b[5] + a[5],
    )


def translate(dx: float, dy: float) -> AffineTransform:
    return AffineTransform(x_offset=dx, y_offset=dy)


def rotate(degrees: float) -> AffineTransform:
    theta = math.radians(degrees)
    c = math.cos(theta)
    s = math.sin(theta)
    return AffineTransform(c, s, -s, c, 0.0, 0.0)


def scale(sx: float, sy: float) -> AffineTransform:
    return AffineTransform(x_scale=sx, y_scale=sy)


def skew(kx: float, ky: float) -> AffineTransform:
    """Skew by raw factors (not angles), as stored in a component's slant."""
    return AffineTransform(1.0, ky, kx, 1.0, 0.0, 0.0)


def round_half_away(value: float, digits: int = PRECISION) -> float:
    """Round to ``digits`` decimals, halves away from zero.

    ``round()`` rounds halves to even, which would make the written value
    depend on the parity of the last kept digit.
    """
    factor = 10.0 ** digits
    scaled = value * factor
    if not math.isfinite(scaled):
        return value
    return math.copysign(math.floor(abs(scaled) + 0.5), scaled) / factor


def decompose(t: AffineTransform) -> Tuple[float, float, float]:
    """Split the linear part of ``t`` into (scale_x, scale_y, rotation).

    Rotation is in degrees. The translation is not part of the result; it
    passes through unchanged as ``(t.x_offset, t.y_offset)``.

    Mirrored transforms (negative determinant) are folded so that the
    rotation stays within (-180, 180] where possible, matching what
    glyphsLib writes for the same component.
    """
    det = t.x_scale * t.y_scale - t.xy_scale * t.yx_scale
    s_x = math.hypot(t.x_scale, t.xy_scale)
    s_y = math.hypot(t.yx_scale, t.y_scale)
    if det < 0:
        s_y = -s_y

    r = math.degrees(math.atan2(t.xy_scale * s_y, t.x_scale * s_x))

    if det < 0 and (abs(r) > 135 or r < -90):
        s_x = -s_x
        s_y = -s_y
        if r < 0:
            r += 180
        else:
            r -= 180

    quadrant = 0.0
    if r < -90:
        quadrant = 180.0
        r += quadrant
    if r > 90:
        quadrant = -180.0
        r += quadrant

    # A zero y-scale has no aspect ratio to correct for.
    if s_y != 0:
        r = r * s_x / s_y
    r -= quadrant
    if r < -179:
        r += 360

    return s_x, s_y, r


def recompose(
    offset: Tuple[float, float] = (0.0, 0.0),
    rotation: float = 0.0,
    scale_xy: Tuple[float, float] = (1.0, 1.0),
    skew_xy: Tuple[float, float] = (0.0, 0.0),
) -> AffineTransform:
    """Build translate * rotate * scale * skew, rounded to ``PRECISION``.

    The order matters (the operations do not commute) and matches glyphsLib.
    """
    t = multiply(
        multiply(
            multiply(translate(offset[0], offset[1]), rotate(rotation)),
            scale(scale_xy[0], scale_xy[1]),
        ),
        skew(skew_xy[0], skew_xy[1]),
    )
    return AffineTransform(*(round_half_away(c) for c in t))
