"""Preview module for image output.

Components:
    export: Gamma correction, 8-bit conversion and PNG export via Pillow

Example:
    >>> from raylight.preview import save_png
    >>> save_png(buffer, "output.png")
"""

from .export import apply_gamma, image_to_uint8, save_png, save_png_from_array

__all__ = [
    "apply_gamma",
    "image_to_uint8",
    "save_png",
    "save_png_from_array",
]
