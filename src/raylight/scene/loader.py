"""JSON scene loading.

Scene files describe image size, camera, background, objects and lights:

    {
      "width": 640, "height": 480,
      "camera": {"fov": 90},
      "background": [0.1, 0.1, 0.2],
      "objects": [
        {"type": "sphere", "center": [0, 0, -5], "radius": 1,
         "material": {"color": [1, 0, 0], "reflectivity": 0.3}},
        {"type": "plane", "point": [0, -1, 0], "normal": [0, 1, 0],
         "material": {"color": [0.8, 0.8, 0.8]}}
      ],
      "lights": [
        {"type": "point", "position": [2, 5, 0], "color": [1, 1, 1], "intensity": 1},
        {"type": "directional", "direction": [0, -1, -1], "intensity": 0.5}
      ]
    }

Colors are either [r, g, b] floats in [0, 1] or {"r": .., "g": .., "b": ..}
objects with 0-255 channel values (an "a" channel is accepted and ignored).
Image size may also be given inside the camera object. Unknown keys are
rejected at every level, so a misspelled section is an error rather than an
empty scene.

Legacy documents, recognised by their "elements" key, are read too:

    {
      "camera": {"width": 800, "height": 600, "fov": 90},
      "sky_color": {"r": 50, "g": 50, "b": 80, "a": 255},
      "elements": [
        {"shape": {"SPHERE": {"origin": {"x": 0, "y": 0, "z": -5}, "radius": 1}},
         "material": {"base_color": {"r": 255, "g": 0, "b": 0, "a": 255},
                      "albedo": 1.0, "reflectiveness": 0.2}}
      ],
      "lights": [
        {"POINT": {"position": {"x": 0, "y": 5, "z": 0}, "brightness": 300,
                   "color": {"r": 255, "g": 255, "b": 255, "a": 255}}}
      ]
    }

Legacy point light brightness was meant for inverse-square falloff; render
those scenes with Falloff.INVERSE_SQUARE to match their intended lighting.

Example:
    >>> from raylight.scene.loader import load_scene
    >>> scene = load_scene("examples/scene.json")
"""

import json
import logging
from pathlib import Path
from typing import Any

from raylight.camera.canonical import Camera
from raylight.scene.description import (
    Color,
    DirectionalLight,
    Light,
    Material,
    PlaneShape,
    PointLight,
    Scene,
    SceneObject,
    SphereShape,
    Vec3,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Allowed Keys
# =============================================================================

ROOT_KEYS = frozenset({"width", "height", "camera", "background", "objects", "lights"})
CAMERA_KEYS = frozenset({"width", "height", "fov"})
MATERIAL_KEYS = frozenset({"color", "reflectivity"})
SPHERE_KEYS = frozenset({"type", "material", "center", "radius"})
PLANE_KEYS = frozenset({"type", "material", "point", "normal"})
POINT_LIGHT_KEYS = frozenset({"type", "position", "color", "intensity"})
DIRECTIONAL_LIGHT_KEYS = frozenset({"type", "direction", "color", "intensity"})
BYTE_COLOR_KEYS = frozenset({"r", "g", "b", "a"})

LEGACY_ROOT_KEYS = frozenset({"camera", "elements", "lights", "sky_color"})
LEGACY_ELEMENT_KEYS = frozenset({"shape", "material"})
LEGACY_MATERIAL_KEYS = frozenset({"base_color", "albedo", "reflectiveness"})
LEGACY_SPHERE_KEYS = frozenset({"origin", "radius"})
LEGACY_PLANE_KEYS = frozenset({"point", "normal"})
LEGACY_POINT_LIGHT_KEYS = frozenset({"position", "brightness", "color"})
LEGACY_DIRECTIONAL_LIGHT_KEYS = frozenset({"direction", "brightness", "color"})
XYZ_KEYS = frozenset({"x", "y", "z"})


class SceneFormatError(ValueError):
    """Raised when a scene document is structurally invalid.

    Attributes:
        path: Location of the problem inside the document (e.g.
            "objects[2].material.color").
    """

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


# =============================================================================
# Primitive Values
# =============================================================================


def _require(data: dict[str, Any], key: str, path: str) -> Any:
    if key not in data:
        raise SceneFormatError(path, f"missing required key '{key}'")
    return data[key]


def _as_mapping(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise SceneFormatError(path, f"expected an object, got {type(value).__name__}")
    return value


def _check_keys(data: dict[str, Any], allowed: frozenset, path: str) -> None:
    for key in data:
        if key not in allowed:
            raise SceneFormatError(path, f"unknown key '{key}'")


def _parse_number(value: Any, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SceneFormatError(path, f"expected a number, got {value!r}")
    return float(value)


def _parse_vec3(value: Any, path: str) -> Vec3:
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise SceneFormatError(path, f"expected a list of 3 numbers, got {value!r}")
    x, y, z = (_parse_number(c, f"{path}[{i}]") for i, c in enumerate(value))
    return (x, y, z)


def _parse_xyz(value: Any, path: str) -> Vec3:
    """Read a {"x", "y", "z"} object (legacy vectors)."""
    data = _as_mapping(value, path)
    _check_keys(data, XYZ_KEYS, path)
    x, y, z = (_parse_number(_require(data, axis, path), f"{path}.{axis}") for axis in "xyz")
    return (x, y, z)


def _parse_color(value: Any, path: str) -> Color:
    if isinstance(value, dict):
        _check_keys(value, BYTE_COLOR_KEYS, path)
        channels = []
        for name in ("r", "g", "b"):
            channel = _parse_number(_require(value, name, path), f"{path}.{name}")
            if not 0.0 <= channel <= 255.0:
                raise SceneFormatError(f"{path}.{name}", f"expected 0-255, got {channel}")
            channels.append(channel / 255.0)
        return (channels[0], channels[1], channels[2])
    return _parse_vec3(value, path)


def _parse_dimension(data: dict[str, Any], camera: dict[str, Any], key: str) -> int:
    if key in data:
        value, path = data[key], key
    elif key in camera:
        value, path = camera[key], f"camera.{key}"
    else:
        raise SceneFormatError("<root>", f"missing required key '{key}'")
    if isinstance(value, bool) or not isinstance(value, int):
        raise SceneFormatError(path, f"expected an integer, got {value!r}")
    return value


def _parse_list(value: Any, path: str) -> list:
    if not isinstance(value, list):
        raise SceneFormatError(path, "expected a list")
    return value


def _build(parse, value: Any, path: str):
    """Run a parser, reporting value errors at the given document path."""
    try:
        return parse(value, path)
    except SceneFormatError:
        raise
    except ValueError as e:
        raise SceneFormatError(path, str(e)) from e


def _parse_camera(camera_data: dict[str, Any]) -> Camera:
    return _build(
        lambda value, path: Camera(fov=_parse_number(value, path)),
        camera_data.get("fov", 90.0),
        "camera.fov",
    )


def _make_scene(camera, width, height, background, objects, lights) -> Scene:
    try:
        return Scene(
            camera=camera,
            width=width,
            height=height,
            background=background,
            objects=objects,
            lights=lights,
        )
    except ValueError as e:
        raise SceneFormatError("<root>", str(e)) from e


# =============================================================================
# Native Format
# =============================================================================


def _parse_material(value: Any, path: str) -> Material:
    data = _as_mapping(value, path)
    _check_keys(data, MATERIAL_KEYS, path)
    color = _parse_color(_require(data, "color", path), f"{path}.color")
    reflectivity = _parse_number(data.get("reflectivity", 0.0), f"{path}.reflectivity")
    return Material(color=color, reflectivity=reflectivity)


def _parse_object(value: Any, path: str) -> SceneObject:
    data = _as_mapping(value, path)
    kind = _require(data, "type", path)
    material = _parse_material(_require(data, "material", path), f"{path}.material")

    if kind == "sphere":
        _check_keys(data, SPHERE_KEYS, path)
        shape = SphereShape(
            center=_parse_vec3(_require(data, "center", path), f"{path}.center"),
            radius=_parse_number(_require(data, "radius", path), f"{path}.radius"),
        )
    elif kind == "plane":
        _check_keys(data, PLANE_KEYS, path)
        shape = PlaneShape(
            point=_parse_vec3(_require(data, "point", path), f"{path}.point"),
            normal=_parse_vec3(_require(data, "normal", path), f"{path}.normal"),
        )
    else:
        raise SceneFormatError(f"{path}.type", f"unknown object type {kind!r}")

    return SceneObject(shape=shape, material=material)


def _parse_light(value: Any, path: str) -> Light:
    data = _as_mapping(value, path)
    kind = _require(data, "type", path)
    color = _parse_color(data.get("color", [1.0, 1.0, 1.0]), f"{path}.color")
    intensity = _parse_number(data.get("intensity", 1.0), f"{path}.intensity")

    if kind == "point":
        _check_keys(data, POINT_LIGHT_KEYS, path)
        position = _parse_vec3(_require(data, "position", path), f"{path}.position")
        return PointLight(position=position, color=color, intensity=intensity)
    if kind == "directional":
        _check_keys(data, DIRECTIONAL_LIGHT_KEYS, path)
        direction = _parse_vec3(_require(data, "direction", path), f"{path}.direction")
        return DirectionalLight(direction=direction, color=color, intensity=intensity)
    raise SceneFormatError(f"{path}.type", f"unknown light type {kind!r}")


def _parse_native_scene(root: dict[str, Any]) -> Scene:
    _check_keys(root, ROOT_KEYS, "<root>")
    camera_data = _as_mapping(root.get("camera", {}), "camera")
    _check_keys(camera_data, CAMERA_KEYS, "camera")

    width = _parse_dimension(root, camera_data, "width")
    height = _parse_dimension(root, camera_data, "height")
    camera = _parse_camera(camera_data)

    objects_data = _parse_list(root.get("objects", []), "objects")
    lights_data = _parse_list(root.get("lights", []), "lights")

    background = _build(_parse_color, root.get("background", [0.0, 0.0, 0.0]), "background")
    objects = tuple(_build(_parse_object, obj, f"objects[{i}]") for i, obj in enumerate(objects_data))
    lights = tuple(_build(_parse_light, light, f"lights[{i}]") for i, light in enumerate(lights_data))

    return _make_scene(camera, width, height, background, objects, lights)


# =============================================================================
# Legacy Format
# =============================================================================


def _parse_variant(value: Any, path: str, variants: tuple[str, ...]) -> tuple[str, dict[str, Any], str]:
    """Unpack a {"TAG": {...}} object into (tag, body, body path)."""
    data = _as_mapping(value, path)
    if len(data) != 1:
        raise SceneFormatError(path, f"expected exactly one of {', '.join(variants)}")
    tag, body = next(iter(data.items()))
    if tag not in variants:
        raise SceneFormatError(path, f"unknown variant '{tag}', expected one of {', '.join(variants)}")
    body_path = f"{path}.{tag}"
    return tag, _as_mapping(body, body_path), body_path


def _parse_legacy_material(value: Any, path: str) -> Material:
    data = _as_mapping(value, path)
    _check_keys(data, LEGACY_MATERIAL_KEYS, path)
    base = _parse_color(_require(data, "base_color", path), f"{path}.base_color")
    albedo = _parse_number(data.get("albedo", 1.0), f"{path}.albedo")
    if albedo < 0.0:
        raise SceneFormatError(f"{path}.albedo", f"expected a non-negative number, got {albedo}")
    reflectivity = _parse_number(data.get("reflectiveness", 0.0), f"{path}.reflectiveness")
    # Albedo scales the base color; there is no separate albedo term in Material
    r, g, b = (min(channel * albedo, 1.0) for channel in base)
    return Material(color=(r, g, b), reflectivity=reflectivity)


def _parse_legacy_element(value: Any, path: str) -> SceneObject:
    data = _as_mapping(value, path)
    _check_keys(data, LEGACY_ELEMENT_KEYS, path)
    material = _parse_legacy_material(_require(data, "material", path), f"{path}.material")

    kind, body, body_path = _parse_variant(_require(data, "shape", path), f"{path}.shape", ("SPHERE", "PLANE"))
    if kind == "SPHERE":
        _check_keys(body, LEGACY_SPHERE_KEYS, body_path)
        shape = SphereShape(
            center=_parse_xyz(_require(body, "origin", body_path), f"{body_path}.origin"),
            radius=_parse_number(_require(body, "radius", body_path), f"{body_path}.radius"),
        )
    else:
        _check_keys(body, LEGACY_PLANE_KEYS, body_path)
        shape = PlaneShape(
            point=_parse_xyz(_require(body, "point", body_path), f"{body_path}.point"),
            normal=_parse_xyz(_require(body, "normal", body_path), f"{body_path}.normal"),
        )
    return SceneObject(shape=shape, material=material)


def _parse_legacy_light(value: Any, path: str) -> Light:
    kind, body, body_path = _parse_variant(value, path, ("POINT", "DIRECTIONAL"))
    color = _parse_color(body.get("color", {"r": 255, "g": 255, "b": 255}), f"{body_path}.color")
    brightness = _parse_number(body.get("brightness", 1.0), f"{body_path}.brightness")

    if kind == "POINT":
        _check_keys(body, LEGACY_POINT_LIGHT_KEYS, body_path)
        position = _parse_xyz(_require(body, "position", body_path), f"{body_path}.position")
        return PointLight(position=position, color=color, intensity=brightness)
    _check_keys(body, LEGACY_DIRECTIONAL_LIGHT_KEYS, body_path)
    direction = _parse_xyz(_require(body, "direction", body_path), f"{body_path}.direction")
    return DirectionalLight(direction=direction, color=color, intensity=brightness)


def _parse_legacy_scene(root: dict[str, Any]) -> Scene:
    _check_keys(root, LEGACY_ROOT_KEYS, "<root>")
    camera_data = _as_mapping(_require(root, "camera", "<root>"), "camera")
    _check_keys(camera_data, CAMERA_KEYS, "camera")

    width = _parse_dimension({}, camera_data, "width")
    height = _parse_dimension({}, camera_data, "height")
    camera = _parse_camera(camera_data)

    elements_data = _parse_list(root["elements"], "elements")
    lights_data = _parse_list(root.get("lights", []), "lights")

    background = _build(_parse_color, root.get("sky_color", [0.0, 0.0, 0.0]), "sky_color")
    objects = tuple(
        _build(_parse_legacy_element, element, f"elements[{i}]") for i, element in enumerate(elements_data)
    )
    lights = tuple(_build(_parse_legacy_light, light, f"lights[{i}]") for i, light in enumerate(lights_data))

    return _make_scene(camera, width, height, background, objects, lights)


# =============================================================================
# Public API
# =============================================================================


def parse_scene(data: Any) -> Scene:
    """Build a Scene from an already decoded JSON document.

    Documents with an "elements" key are read in the legacy layout; all
    others in the native one.

    Args:
        data: The decoded document (a dict).

    Returns:
        The validated Scene.

    Raises:
        SceneFormatError: If the document is malformed, has unknown keys or
            any value is invalid.
    """
    root = _as_mapping(data, "<root>")
    if "elements" in root:
        return _parse_legacy_scene(root)
    return _parse_native_scene(root)


def load_scene(path: str | Path) -> Scene:
    """Load a Scene from a JSON file.

    Args:
        path: Path to the scene file.

    Returns:
        The validated Scene.

    Raises:
        OSError: If the file cannot be read.
        SceneFormatError: If the file is not valid JSON or not a valid scene.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SceneFormatError(str(path), f"invalid JSON: {e}") from e

    scene = parse_scene(data)
    logger.info(
        "Loaded scene %s: %dx%d, %d objects, %d lights",
        path,
        scene.width,
        scene.height,
        len(scene.objects),
        len(scene.lights),
    )
    return scene
