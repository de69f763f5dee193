"""Taichi-based Whitted-style ray tracer.

This package renders scenes made of spheres and infinite planes, lit by point
and directional lights, with hard shadows and recursive mirror reflection:
- Scene description as validated, immutable dataclasses
- JSON scene loading
- Parallel per-pixel rendering into a PixelBuffer
- PNG export

Subpackages:
    core: Ray utilities, shading engine and render driver
    geometry: Sphere and plane intersection
    scene: Scene description, device-side scene data, demo scene and loader
    lighting: Light evaluation and shadow rays
    camera: Canonical pinhole camera
    preview: Image export

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raylight import render
    >>> from raylight.scene.demo import create_demo_scene
    >>> buffer = render(create_demo_scene(320, 240))
"""

from .camera.canonical import Camera
from .core.renderer import PixelBuffer, RenderConfig, Renderer, render
from .lighting.lights import Falloff
from .scene.description import (
    DirectionalLight,
    Material,
    PlaneShape,
    PointLight,
    Scene,
    SceneObject,
    SphereShape,
)
from .scene.loader import SceneFormatError, load_scene

__version__ = "0.1.0"

__all__ = [
    "render",
    "Renderer",
    "RenderConfig",
    "PixelBuffer",
    "Falloff",
    "Camera",
    "Scene",
    "SceneObject",
    "Material",
    "SphereShape",
    "PlaneShape",
    "PointLight",
    "DirectionalLight",
    "load_scene",
    "SceneFormatError",
]
