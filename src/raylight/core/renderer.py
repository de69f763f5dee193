"""Render driver: turns a Scene into a PixelBuffer.

The Renderer uploads a Scene into its own Taichi fields, then runs a single
kernel whose outermost loop covers every pixel. Taichi parallelises that
loop across CPU threads (or GPU lanes); every pixel writes only its own cell
of the color buffer, so no locking is needed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raylight.core.renderer import RenderConfig, render
    >>> from raylight.scene.demo import create_demo_scene
    >>>
    >>> scene = create_demo_scene(320, 240)
    >>> buffer = render(scene, RenderConfig(max_depth=5))
    >>> buffer.get_pixel(160, 120)
"""

import logging
import math
import time
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raylight.camera.canonical import fov_adjustment, primary_ray
from raylight.core.shading import shade
from raylight.lighting.lights import Falloff
from raylight.scene.description import Scene
from raylight.scene.intersection import SceneData

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Reflection bounces after the first hit
DEFAULT_MAX_DEPTH = 3

# Minimum hit distance and secondary ray offset (avoids shadow acne)
RAY_EPSILON = 1e-4


@dataclass(frozen=True)
class RenderConfig:
    """Settings for a render pass.

    Attributes:
        max_depth: Maximum number of reflection bounces (non-negative).
        epsilon: Self-intersection offset for secondary rays (positive).
        falloff: Point light attenuation law.
        serialize: Run the pixel loop on a single thread.
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    epsilon: float = RAY_EPSILON
    falloff: Falloff = Falloff.NONE
    serialize: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
            raise ValueError(f"max_depth must be an integer, got {self.max_depth!r}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if not math.isfinite(self.epsilon) or self.epsilon <= 0.0:
            raise ValueError(f"epsilon must be a positive finite number, got {self.epsilon}")
        object.__setattr__(self, "falloff", Falloff(self.falloff))


class PixelBuffer:
    """A finished image: row-major RGB values in [0, 1].

    Attributes:
        pixels: Float32 array of shape (height, width, 3). Row 0 is the top
            of the image.
    """

    def __init__(self, pixels: npt.NDArray[np.float32]) -> None:
        if pixels.ndim != 3 or pixels.shape[2] != 3:
            raise ValueError(f"Pixel array must have shape (height, width, 3), got {pixels.shape}")
        self.pixels = pixels

    @property
    def width(self) -> int:
        """Image width in pixels."""
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        """Image height in pixels."""
        return int(self.pixels.shape[0])

    def get_pixel(self, x: int, y: int) -> tuple[float, float, float]:
        """Color of the pixel at column x, row y (row 0 at the top)."""
        r, g, b = self.pixels[y, x]
        return (float(r), float(g), float(b))

    def to_uint8(self, gamma: float = 1.0) -> npt.NDArray[np.uint8]:
        """Convert to 8-bit RGB, optionally gamma encoding first."""
        from raylight.preview.export import image_to_uint8

        return image_to_uint8(self.pixels, gamma=gamma)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return np.array_equal(self.pixels, other.pixels)

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height})"


@ti.data_oriented
class Renderer:
    """Renders one Scene with one RenderConfig.

    The renderer owns the scene fields, the color buffer and a per-pixel
    counter of scene queries. It can be asked to render repeatedly; every
    render overwrites the whole buffer. destroy() (or leaving a ``with``
    block) frees all of its Taichi fields.

    Attributes:
        scene: The scene being rendered.
        config: The render settings.
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, scene: Scene, config: RenderConfig | None = None) -> None:
        """Upload the scene and allocate the render target.

        Args:
            scene: The scene to render.
            config: Render settings. Defaults to RenderConfig().
        """
        self.scene = scene
        self.config = config if config is not None else RenderConfig()
        self.width = scene.width
        self.height = scene.height
        self._fov_scale = fov_adjustment(scene.camera)

        self.scene_data = SceneData(scene)

        # Render target (row-major: row 0 is the top of the image)
        self._color_buffer = ti.Vector.field(3, dtype=ti.f32)
        self._segment_count = ti.field(dtype=ti.i32)

        # Single-ray inputs and outputs used by trace()
        self._trace_origin = ti.Vector.field(3, dtype=ti.f32)
        self._trace_direction = ti.Vector.field(3, dtype=ti.f32)
        self._trace_color = ti.Vector.field(3, dtype=ti.f32)
        self._trace_segments = ti.field(dtype=ti.i32)

        builder = ti.FieldsBuilder()
        builder.dense(ti.ij, (self.height, self.width)).place(self._color_buffer, self._segment_count)
        builder.place(
            self._trace_origin,
            self._trace_direction,
            self._trace_color,
            self._trace_segments,
        )
        self._snode_tree = builder.finalize()

        logger.info(
            "Renderer ready: %dx%d, %d objects, %d lights, max_depth=%d, falloff=%s",
            self.width,
            self.height,
            self.scene_data.num_objects,
            self.scene_data.num_lights,
            self.config.max_depth,
            self.config.falloff.name,
        )

    # =========================================================================
    # Kernels
    # =========================================================================

    @ti.kernel
    def _render_kernel(
        self,
        max_depth: ti.i32,
        epsilon: ti.f32,
        falloff: ti.i32,
        fov_scale: ti.f32,
        serialize: ti.template(),
    ):
        """Shade every pixel once and store the result."""
        ti.loop_config(serialize=serialize)
        for py, px in ti.ndrange(self.height, self.width):
            ray = primary_ray(px, py, self.width, self.height, fov_scale)
            color, segments = shade(
                self.scene_data, ray.origin, ray.direction, max_depth, epsilon, falloff
            )
            self._color_buffer[py, px] = color
            self._segment_count[py, px] = segments

    @ti.kernel
    def _trace_kernel(self, max_depth: ti.i32, epsilon: ti.f32, falloff: ti.i32):
        """Shade the single ray stored by trace()."""
        # Single-iteration outer loop keeps the scene loops inside shade() serial
        for _ in range(1):
            color, segments = shade(
                self.scene_data,
                self._trace_origin[None],
                self._trace_direction[None],
                max_depth,
                epsilon,
                falloff,
            )
            self._trace_color[None] = color
            self._trace_segments[None] = segments

    # =========================================================================
    # Public API
    # =========================================================================

    @property
    def destroyed(self) -> bool:
        """True once destroy() has released the Taichi fields."""
        return self._snode_tree is None

    def destroy(self) -> None:
        """Free the render target and the scene fields.

        PixelBuffers returned earlier stay valid; they hold NumPy copies.
        Calling destroy() again does nothing.
        """
        if self._snode_tree is not None:
            self._snode_tree.destroy()
            self._snode_tree = None
            self.scene_data.destroy()
            logger.debug("Released render fields for %dx%d", self.width, self.height)

    def __enter__(self) -> "Renderer":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.destroy()

    def _check_alive(self) -> None:
        if self.destroyed:
            raise RuntimeError("Renderer has been destroyed")

    def render(self) -> PixelBuffer:
        """Render the scene.

        Returns:
            A PixelBuffer holding a copy of the rendered image.

        Raises:
            RuntimeError: If the renderer has been destroyed.
        """
        self._check_alive()
        start_time = time.time()
        self._render_kernel(
            self.config.max_depth,
            self.config.epsilon,
            int(self.config.falloff),
            self._fov_scale,
            self.config.serialize,
        )
        pixels = self._color_buffer.to_numpy().astype(np.float32)
        elapsed = time.time() - start_time
        logger.info(
            "Rendered %dx%d in %.3fs (%d scene queries)",
            self.width,
            self.height,
            elapsed,
            self.rays_traced,
        )
        return PixelBuffer(pixels)

    def trace(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
    ) -> tuple[tuple[float, float, float], int]:
        """Shade a single ray with this renderer's scene and settings.

        Args:
            origin: Ray origin.
            direction: Ray direction. Normalized before tracing.

        Returns:
            Tuple of (color, segments) where segments is the number of scene
            queries the ray needed.
        """
        self._check_alive()
        length = math.sqrt(sum(c * c for c in direction))
        if length > 0.0:
            direction = tuple(c / length for c in direction)
        self._trace_origin[None] = [float(c) for c in origin]
        self._trace_direction[None] = [float(c) for c in direction]
        self._trace_kernel(self.config.max_depth, self.config.epsilon, int(self.config.falloff))
        color = self._trace_color[None]
        return (float(color[0]), float(color[1]), float(color[2])), int(self._trace_segments[None])

    @property
    def rays_traced(self) -> int:
        """Number of scene queries made by the last render()."""
        return int(self._segment_count.to_numpy().sum())

    def segment_counts(self) -> npt.NDArray[np.int32]:
        """Per-pixel number of scene queries from the last render()."""
        return self._segment_count.to_numpy()

    def __repr__(self) -> str:
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"max_depth={self.config.max_depth})"
        )


def render(scene: Scene, config: RenderConfig | None = None) -> PixelBuffer:
    """Render a scene into a PixelBuffer.

    Args:
        scene: The scene to render.
        config: Render settings. Defaults to RenderConfig().

    Returns:
        The rendered image.
    """
    with Renderer(scene, config) as renderer:
        return renderer.render()
