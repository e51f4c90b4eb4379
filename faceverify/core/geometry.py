"""Crop geometry for face extraction.

A detector's tight box usually cuts off hair, chin and ears. expand_box()
grows it by a fixed fraction of its own size, centred on the original box,
and clamps the result to the image so the crop never overruns the pixels.
"""

from __future__ import annotations

from faceverify.core.interfaces import BBox


def expand_box(
    box: BBox,
    zoom_factor: float,
    image_width: int,
    image_height: int,
) -> BBox:
    """Expand a detection box and clamp it to the image bounds.

    The box grows by ``box.width * zoom_factor`` horizontally and
    ``box.height * zoom_factor`` vertically, split evenly on both sides.
    The origin is clamped to 0 and the size is capped so the box ends at or
    before the image edge. Coordinates are truncated toward zero.

    Args:
        box: Tight detection box in image coordinates
        zoom_factor: Fraction of the box size to add (0.3 adds 30%)
        image_width: Source image width in pixels
        image_height: Source image height in pixels

    Returns:
        Integer BBox fully contained in [0, image_width] x [0, image_height].

    Raises:
        ValueError: If zoom_factor is negative or the image size is not positive.

    Example:
        >>> expand_box(BBox(100, 100, 50, 50), 0.3, 640, 480)
        BBox(x=92, y=92, width=65, height=65)
    """
    if zoom_factor < 0:
        raise ValueError(f"zoom_factor must be >= 0, got {zoom_factor}")
    if image_width <= 0 or image_height <= 0:
        raise ValueError(
            f"Image size must be positive, got {image_width}x{image_height}"
        )

    zoom_x = box.width * zoom_factor
    zoom_y = box.height * zoom_factor

    new_x = max(0.0, box.x - zoom_x / 2)
    new_y = max(0.0, box.y - zoom_y / 2)
    new_width = min(image_width - new_x, box.width + zoom_x)
    new_height = min(image_height - new_y, box.height + zoom_y)

    # A sub-pixel extent would truncate to an empty crop; the origin is
    # strictly inside the image, so one pixel always fits.
    return BBox(
        x=int(new_x),
        y=int(new_y),
        width=max(1, int(new_width)),
        height=max(1, int(new_height)),
    )
