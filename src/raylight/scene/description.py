"""Host-side scene description.

These frozen dataclasses are what callers build (directly, through the demo
factory or through the JSON loader) and hand to the renderer. They validate
their values on construction and are never mutated afterwards, so a Scene
can be shared by any number of renders.

Shapes and lights are closed unions (SphereShape | PlaneShape and
PointLight | DirectionalLight). On the device each variant is stored with a
ShapeKind / LightKind tag and dispatched on that tag.

Example:
    >>> from raylight.scene.description import (
    ...     Material, PointLight, Scene, SceneObject, SphereShape
    ... )
    >>> from raylight.camera.canonical import Camera
    >>> red = Material(color=(0.9, 0.1, 0.1), reflectivity=0.2)
    >>> scene = Scene(
    ...     camera=Camera(fov=60.0),
    ...     width=320,
    ...     height=240,
    ...     background=(0.1, 0.1, 0.2),
    ...     objects=(SceneObject(SphereShape((0, 0, -5), 1.0), red),),
    ...     lights=(PointLight((2, 5, 0), (1, 1, 1), 1.0),),
    ... )
"""

import math
from dataclasses import dataclass, field
from enum import IntEnum

from raylight.camera.canonical import Camera

Vec3 = tuple[float, float, float]
Color = tuple[float, float, float]


class ShapeKind(IntEnum):
    """Device-side tag for the shape variants."""

    SPHERE = 0
    PLANE = 1


class LightKind(IntEnum):
    """Device-side tag for the light variants."""

    POINT = 0
    DIRECTIONAL = 1


def _as_vec3(value, name: str) -> Vec3:
    """Convert a 3-sequence to a tuple of finite floats."""
    try:
        x, y, z = (float(c) for c in value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be a sequence of 3 numbers, got {value!r}") from e
    if not all(math.isfinite(c) for c in (x, y, z)):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return (x, y, z)


def _as_color(value, name: str) -> Color:
    """Convert a 3-sequence to an RGB tuple with channels in [0, 1]."""
    color = _as_vec3(value, name)
    if any(c < 0.0 or c > 1.0 for c in color):
        raise ValueError(f"{name} components must be in [0, 1], got {color}")
    return color


def _check_unit_interval(value: float, name: str) -> float:
    value = float(value)
    if not math.isfinite(value) or not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be in [0, 1], got {value}")
    return value


# =============================================================================
# Shapes
# =============================================================================


@dataclass(frozen=True)
class SphereShape:
    """A sphere.

    Attributes:
        center: Center point (x, y, z).
        radius: Radius. Must be finite and non-negative; a zero radius is
            allowed and never intersects anything.
    """

    center: Vec3
    radius: float

    kind = ShapeKind.SPHERE

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", _as_vec3(self.center, "Sphere center"))
        radius = float(self.radius)
        if not math.isfinite(radius) or radius < 0.0:
            raise ValueError(f"Sphere radius must be finite and non-negative, got {self.radius}")
        object.__setattr__(self, "radius", radius)


@dataclass(frozen=True)
class PlaneShape:
    """An infinite, two-sided plane.

    Attributes:
        point: Any point on the plane.
        normal: Plane normal. It is normalized on upload; a zero-length
            normal is allowed and never intersects anything.
    """

    point: Vec3
    normal: Vec3

    kind = ShapeKind.PLANE

    def __post_init__(self) -> None:
        object.__setattr__(self, "point", _as_vec3(self.point, "Plane point"))
        object.__setattr__(self, "normal", _as_vec3(self.normal, "Plane normal"))


Shape = SphereShape | PlaneShape


# =============================================================================
# Materials and objects
# =============================================================================


@dataclass(frozen=True)
class Material:
    """Surface material.

    Attributes:
        color: Diffuse color (R, G, B), each channel in [0, 1].
        reflectivity: Fraction of the final color taken from the mirror
            reflection, in [0, 1]. 0 is fully diffuse, 1 a perfect mirror.
    """

    color: Color
    reflectivity: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", _as_color(self.color, "Material color"))
        object.__setattr__(
            self,
            "reflectivity",
            _check_unit_interval(self.reflectivity, "Material reflectivity"),
        )


@dataclass(frozen=True)
class SceneObject:
    """A shape paired with the material it is rendered with."""

    shape: Shape
    material: Material

    def __post_init__(self) -> None:
        if not isinstance(self.shape, (SphereShape, PlaneShape)):
            raise ValueError(f"Unsupported shape type: {type(self.shape).__name__}")
        if not isinstance(self.material, Material):
            raise ValueError(f"Expected a Material, got {type(self.material).__name__}")


# =============================================================================
# Lights
# =============================================================================


def _check_intensity(intensity: float) -> float:
    intensity = float(intensity)
    if not math.isfinite(intensity) or intensity < 0.0:
        raise ValueError(f"Light intensity must be finite and non-negative, got {intensity}")
    return intensity


@dataclass(frozen=True)
class PointLight:
    """A light radiating from a single point.

    Attributes:
        position: Light position.
        color: Light color, each channel in [0, 1].
        intensity: Non-negative brightness multiplier.
    """

    position: Vec3
    color: Color = (1.0, 1.0, 1.0)
    intensity: float = 1.0

    kind = LightKind.POINT

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", _as_vec3(self.position, "Light position"))
        object.__setattr__(self, "color", _as_color(self.color, "Light color"))
        object.__setattr__(self, "intensity", _check_intensity(self.intensity))


@dataclass(frozen=True)
class DirectionalLight:
    """A light infinitely far away shining along a fixed direction.

    Attributes:
        direction: Direction the light travels (from the light toward the
            scene). Need not be normalized.
        color: Light color, each channel in [0, 1].
        intensity: Non-negative brightness multiplier.
    """

    direction: Vec3
    color: Color = (1.0, 1.0, 1.0)
    intensity: float = 1.0

    kind = LightKind.DIRECTIONAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", _as_vec3(self.direction, "Light direction"))
        object.__setattr__(self, "color", _as_color(self.color, "Light color"))
        object.__setattr__(self, "intensity", _check_intensity(self.intensity))


Light = PointLight | DirectionalLight


# =============================================================================
# Scene
# =============================================================================


@dataclass(frozen=True)
class Scene:
    """Everything needed to render one image.

    Attributes:
        camera: The canonical camera (only its field of view varies).
        width: Image width in pixels (positive).
        height: Image height in pixels (positive).
        background: Color returned by rays that hit nothing.
        objects: Scene objects in collection order. The order decides which
            object wins when two are hit at exactly the same distance.
        lights: Lights; every light contributes additively.
    """

    camera: Camera
    width: int
    height: int
    background: Color = (0.0, 0.0, 0.0)
    objects: tuple[SceneObject, ...] = field(default_factory=tuple)
    lights: tuple[Light, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.camera, Camera):
            raise ValueError(f"Expected a Camera, got {type(self.camera).__name__}")
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"Scene {name} must be a positive integer, got {value!r}")
        object.__setattr__(self, "background", _as_color(self.background, "Scene background"))

        objects = tuple(self.objects)
        for obj in objects:
            if not isinstance(obj, SceneObject):
                raise ValueError(f"Expected a SceneObject, got {type(obj).__name__}")
        object.__setattr__(self, "objects", objects)

        lights = tuple(self.lights)
        for light in lights:
            if not isinstance(light, (PointLight, DirectionalLight)):
                raise ValueError(f"Unsupported light type: {type(light).__name__}")
        object.__setattr__(self, "lights", lights)
