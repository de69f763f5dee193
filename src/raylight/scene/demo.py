"""Demo scene configuration.

This module provides a factory for a small showcase scene exercising every
feature of the tracer:

- A reflective floor plane at y = -1
- A back wall plane at z = -12
- Three spheres: a red mirror-ish sphere, a green diffuse sphere and a
  near-perfect chrome sphere
- A white point light above the scene and a dim bluish directional light

The camera is the canonical one (origin, looking down -Z), so every object
sits at negative z.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raylight.scene.demo import create_demo_scene
    >>> from raylight.core.renderer import render
    >>>
    >>> buffer = render(create_demo_scene(320, 240))
"""

from dataclasses import dataclass

from raylight.camera.canonical import Camera
from raylight.scene.description import (
    Color,
    DirectionalLight,
    Material,
    PlaneShape,
    PointLight,
    Scene,
    SceneObject,
    SphereShape,
)

# =============================================================================
# Demo Scene Parameters
# =============================================================================


@dataclass
class DemoSceneParams:
    """Parameters for customizing the demo scene.

    Attributes:
        fov: Vertical field of view in degrees.
        background: Sky color seen by rays that escape the scene.
        floor_color: Diffuse color of the floor plane.
        floor_reflectivity: Reflectivity of the floor plane.
        light_intensity: Intensity of the overhead point light.

    Example:
        >>> params = DemoSceneParams(floor_reflectivity=0.0)
        >>> scene = create_demo_scene(320, 240, params)
    """

    fov: float = 70.0
    background: Color = (0.25, 0.35, 0.5)
    floor_color: Color = (0.8, 0.8, 0.8)
    floor_reflectivity: float = 0.3
    light_intensity: float = 1.0


def create_demo_scene(
    width: int = 640,
    height: int = 480,
    params: DemoSceneParams | None = None,
) -> Scene:
    """Create the demo scene.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        params: Optional scene parameters. Defaults to DemoSceneParams().

    Returns:
        The Scene, ready for rendering.
    """
    if params is None:
        params = DemoSceneParams()

    floor = SceneObject(
        PlaneShape(point=(0.0, -1.0, 0.0), normal=(0.0, 1.0, 0.0)),
        Material(color=params.floor_color, reflectivity=params.floor_reflectivity),
    )
    back_wall = SceneObject(
        PlaneShape(point=(0.0, 0.0, -12.0), normal=(0.0, 0.0, 1.0)),
        Material(color=(0.6, 0.6, 0.7)),
    )

    # =========================================================================
    # Spheres
    # =========================================================================

    red_sphere = SceneObject(
        SphereShape(center=(0.0, 0.0, -5.0), radius=1.0),
        Material(color=(0.9, 0.15, 0.1), reflectivity=0.25),
    )
    green_sphere = SceneObject(
        SphereShape(center=(-2.2, -0.4, -6.0), radius=0.6),
        Material(color=(0.2, 0.8, 0.3)),
    )
    chrome_sphere = SceneObject(
        SphereShape(center=(2.0, 0.2, -7.0), radius=1.2),
        Material(color=(0.9, 0.9, 0.9), reflectivity=0.85),
    )

    # =========================================================================
    # Lights
    # =========================================================================

    lamp = PointLight(
        position=(-3.0, 5.0, -2.0),
        color=(1.0, 1.0, 1.0),
        intensity=params.light_intensity,
    )
    sun = DirectionalLight(
        direction=(1.0, -1.0, -0.5),
        color=(0.7, 0.8, 1.0),
        intensity=0.3,
    )

    return Scene(
        camera=Camera(fov=params.fov),
        width=width,
        height=height,
        background=params.background,
        objects=(floor, back_wall, red_sphere, green_sphere, chrome_sphere),
        lights=(lamp, sun),
    )
