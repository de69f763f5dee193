"""Image export utilities for rendered images.

The renderer produces linear RGB values already clamped to [0, 1]. This
module turns them into 8-bit images and writes them with Pillow.

Supported formats:
    - PNG (8-bit RGB via Pillow); any other extension Pillow knows also works

Example:
    >>> from raylight.core.renderer import render
    >>> from raylight.preview.export import save_png
    >>>
    >>> buffer = render(scene)
    >>> save_png(buffer, "output.png")
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from raylight.core.renderer import PixelBuffer


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Apply gamma correction: output = input^(1/gamma).

    Args:
        image: Linear image array with values in [0, 1].
        gamma: Gamma value. 1.0 leaves the image unchanged.

    Returns:
        Gamma-encoded image, clamped to [0, 1].

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")

    image = np.clip(image, 0.0, 1.0)
    if gamma == 1.0:
        return image.astype(np.float32)
    return np.power(image, 1.0 / gamma).astype(np.float32)


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a [0, 1] float image to uint8.

    Channels are scaled by 255 and truncated, so 1.0 maps to 255 and any
    value below 1/255 maps to 0. NaN values become 0.

    Args:
        image: Image array of shape (H, W, 3).
        gamma: Gamma correction value (default 1.0, no correction).

    Returns:
        8-bit image array of shape (H, W, 3).
    """
    image = np.nan_to_num(image, nan=0.0, posinf=1.0, neginf=0.0)
    processed = apply_gamma(image, gamma)
    return (processed * 255).astype(np.uint8)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str | Path,
    *,
    gamma: float = 1.0,
) -> None:
    """Save a float image array as an 8-bit RGB image file.

    Args:
        image: Image array of shape (H, W, 3), values in [0, 1].
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value (default 1.0).
    """
    image_uint8 = image_to_uint8(image, gamma=gamma)
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(str(filepath))


def save_png(
    buffer: PixelBuffer,
    filepath: str | Path,
    *,
    gamma: float = 1.0,
) -> None:
    """Save a rendered PixelBuffer as an 8-bit RGB image file.

    Args:
        buffer: The rendered image.
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value (default 1.0).

    Example:
        >>> buffer = render(scene)
        >>> save_png(buffer, "output.png", gamma=2.2)
    """
    save_png_from_array(buffer.pixels, filepath, gamma=gamma)
