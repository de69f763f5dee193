"""Scene module for scene description and ray-scene queries.

Components:
    description: Host-side scene dataclasses (shapes, materials, lights)
    intersection: Device-side SceneData with nearest-hit and shadow queries
    demo: Factory for a showcase scene
    loader: JSON scene loading

Scene data is organized for efficient device access:
    - Structure-of-Arrays layout with a kind tag per object and light
    - Objects tested in collection order, so ties go to the first object
"""

from .demo import DemoSceneParams, create_demo_scene
from .description import (
    DirectionalLight,
    Light,
    LightKind,
    Material,
    PlaneShape,
    PointLight,
    Scene,
    SceneObject,
    Shape,
    ShapeKind,
    SphereShape,
)
from .intersection import SceneData, SceneHitRecord
from .loader import SceneFormatError, load_scene, parse_scene

__all__ = [
    # Description module
    "Scene",
    "SceneObject",
    "Material",
    "Shape",
    "SphereShape",
    "PlaneShape",
    "ShapeKind",
    "Light",
    "PointLight",
    "DirectionalLight",
    "LightKind",
    # Intersection module
    "SceneData",
    "SceneHitRecord",
    # Demo module
    "create_demo_scene",
    "DemoSceneParams",
    # Loader module
    "load_scene",
    "parse_scene",
    "SceneFormatError",
]
