"""Scene-level ray intersection testing.

SceneData uploads a host-side Scene into Taichi fields and answers the two
queries the shading engine needs:

- find_nearest: the closest object hit by a ray, with its index so the
  caller can look up the material.
- is_occluded: whether anything lies on a ray segment (shadow rays).

Objects are stored as one tagged array (Structure of Arrays layout): each
slot holds a ShapeKind plus the fields of both variants, and the query loops
dispatch on the tag. Objects are tested in collection order with a strict
comparison against the closest distance so far, so when two objects are hit
at exactly the same distance the earlier one wins.

Every SceneData owns its own fields; nothing here is module-global, so
several scenes can be rendered side by side. The fields sit in a private
SNode tree that destroy() frees, so a long-running process can upload
scene after scene without growing.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raylight.scene.intersection import SceneData
    >>> data = SceneData(scene)
    >>> # Use data.find_nearest(...) within a Taichi kernel
"""

import logging

import taichi as ti
import taichi.math as tm

from raylight.geometry.plane import Plane, hit_plane
from raylight.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_hit_record
from raylight.scene.description import (
    DirectionalLight,
    LightKind,
    PlaneShape,
    PointLight,
    Scene,
    ShapeKind,
    SphereShape,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with the index of the hit object.

    Attributes:
        hit: Whether the ray intersected any object (1 if hit, 0 if miss).
        t: Distance along the ray to the intersection. Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The surface normal at the intersection point (unit length,
            oriented against the ray). Only valid if hit == 1.
        object_index: Index of the hit object in Scene.objects, -1 on miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    object_index: ti.i32


@ti.func
def _hit_record_to_scene_hit_record(rec: HitRecord, object_index: ti.i32) -> SceneHitRecord:
    """Attach an object index to a primitive HitRecord."""
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        object_index=object_index,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        object_index=-1,
    )


@ti.data_oriented
class SceneData:
    """Device-side copy of a Scene.

    Attributes:
        scene: The host-side Scene this data was built from.
        num_objects: Number of scene objects.
        num_lights: Number of lights.
    """

    def __init__(self, scene: Scene) -> None:
        """Allocate fields sized for the scene and upload it.

        Args:
            scene: The scene to upload. It is not modified.
        """
        self.scene = scene
        self.num_objects = len(scene.objects)
        self.num_lights = len(scene.lights)

        # Taichi fields cannot be empty; keep one unused slot
        object_slots = max(self.num_objects, 1)
        light_slots = max(self.num_lights, 1)

        # Object storage: one tagged slot per object
        self.object_kinds = ti.field(dtype=ti.i32)
        self.object_positions = ti.Vector.field(3, dtype=ti.f32)
        self.object_normals = ti.Vector.field(3, dtype=ti.f32)
        self.object_radii = ti.field(dtype=ti.f32)
        self.object_colors = ti.Vector.field(3, dtype=ti.f32)
        self.object_reflectivities = ti.field(dtype=ti.f32)
        self.object_count = ti.field(dtype=ti.i32)

        # Light storage: position for point lights, direction for directional
        self.light_kinds = ti.field(dtype=ti.i32)
        self.light_vectors = ti.Vector.field(3, dtype=ti.f32)
        self.light_colors = ti.Vector.field(3, dtype=ti.f32)
        self.light_intensities = ti.field(dtype=ti.f32)
        self.light_count = ti.field(dtype=ti.i32)

        self.background = ti.Vector.field(3, dtype=ti.f32)

        # All fields live in one SNode tree so destroy() can free them together
        builder = ti.FieldsBuilder()
        builder.dense(ti.i, object_slots).place(
            self.object_kinds,
            self.object_positions,
            self.object_normals,
            self.object_radii,
            self.object_colors,
            self.object_reflectivities,
        )
        builder.dense(ti.i, light_slots).place(
            self.light_kinds,
            self.light_vectors,
            self.light_colors,
            self.light_intensities,
        )
        builder.place(self.object_count, self.light_count, self.background)
        self._snode_tree = builder.finalize()

        logger.debug(
            "Allocated scene fields for %d objects and %d lights",
            self.num_objects,
            self.num_lights,
        )
        self._upload()

    @property
    def destroyed(self) -> bool:
        """True once destroy() has released the fields."""
        return self._snode_tree is None

    def destroy(self) -> None:
        """Free the Taichi fields. Safe to call more than once.

        The fields (and any kernel reading them) must not be used afterwards.
        """
        if self._snode_tree is not None:
            self._snode_tree.destroy()
            self._snode_tree = None
            logger.debug("Released scene fields")

    def _upload(self) -> None:
        """Copy the host-side scene into the Taichi fields."""
        for i, obj in enumerate(self.scene.objects):
            shape = obj.shape
            if isinstance(shape, SphereShape):
                self.object_kinds[i] = int(ShapeKind.SPHERE)
                self.object_positions[i] = list(shape.center)
                self.object_normals[i] = [0.0, 0.0, 0.0]
                self.object_radii[i] = shape.radius
            elif isinstance(shape, PlaneShape):
                self.object_kinds[i] = int(ShapeKind.PLANE)
                self.object_positions[i] = list(shape.point)
                self.object_normals[i] = list(shape.normal)
                self.object_radii[i] = 0.0
            else:
                raise ValueError(f"Unsupported shape type: {type(shape).__name__}")
            self.object_colors[i] = list(obj.material.color)
            self.object_reflectivities[i] = obj.material.reflectivity
        self.object_count[None] = self.num_objects

        for i, light in enumerate(self.scene.lights):
            if isinstance(light, PointLight):
                self.light_kinds[i] = int(LightKind.POINT)
                self.light_vectors[i] = list(light.position)
            elif isinstance(light, DirectionalLight):
                self.light_kinds[i] = int(LightKind.DIRECTIONAL)
                self.light_vectors[i] = list(light.direction)
            else:
                raise ValueError(f"Unsupported light type: {type(light).__name__}")
            self.light_colors[i] = list(light.color)
            self.light_intensities[i] = light.intensity
        self.light_count[None] = self.num_lights

        self.background[None] = list(self.scene.background)

    # =========================================================================
    # Queries (Taichi scope)
    # =========================================================================

    @ti.func
    def intersect_object(
        self,
        index: ti.i32,
        ray_origin: vec3,
        ray_direction: vec3,
        t_min: ti.f32,
        t_max: ti.f32,
    ) -> HitRecord:
        """Intersect a ray with a single object, dispatching on its kind."""
        rec = make_miss_hit_record()
        kind = self.object_kinds[index]
        if kind == int(ShapeKind.SPHERE):
            sphere = Sphere(center=self.object_positions[index], radius=self.object_radii[index])
            rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, t_max)
        elif kind == int(ShapeKind.PLANE):
            plane = Plane(point=self.object_positions[index], normal=self.object_normals[index])
            rec = hit_plane(ray_origin, ray_direction, plane, t_min, t_max)
        return rec

    @ti.func
    def find_nearest(
        self,
        ray_origin: vec3,
        ray_direction: vec3,
        t_min: ti.f32,
        t_max: ti.f32,
    ) -> SceneHitRecord:
        """Find the closest object hit by a ray.

        Each object is tested against the closest distance found so far, so
        an object at exactly the same distance as an earlier one is rejected.

        Args:
            ray_origin: The starting point of the ray.
            ray_direction: The direction vector of the ray.
            t_min: Minimum distance for a valid hit.
            t_max: Maximum distance for a valid hit.

        Returns:
            The closest hit, or a miss record (object_index == -1).
        """
        closest_t = t_max
        result = _make_miss_record()

        for i in range(self.object_count[None]):
            rec = self.intersect_object(i, ray_origin, ray_direction, t_min, closest_t)
            if rec.hit == 1:
                closest_t = rec.t
                result = _hit_record_to_scene_hit_record(rec, i)

        return result

    @ti.func
    def is_occluded(
        self,
        ray_origin: vec3,
        ray_direction: vec3,
        t_min: ti.f32,
        t_max: ti.f32,
    ) -> ti.i32:
        """Test if any object lies on the ray between t_min and t_max.

        Shadow rays pass the distance to the light as t_max so that objects
        behind the light never cast a shadow.

        Returns:
            1 if any object was hit, 0 otherwise.
        """
        hit_any = 0
        for i in range(self.object_count[None]):
            if hit_any == 0:
                rec = self.intersect_object(i, ray_origin, ray_direction, t_min, t_max)
                if rec.hit == 1:
                    hit_any = 1
        return hit_any

    @ti.func
    def object_color(self, index: ti.i32) -> vec3:
        """Diffuse color of an object's material."""
        return self.object_colors[index]

    @ti.func
    def object_reflectivity(self, index: ti.i32) -> ti.f32:
        """Reflectivity of an object's material."""
        return self.object_reflectivities[index]

    def __repr__(self) -> str:
        return f"SceneData(objects={self.num_objects}, lights={self.num_lights})"
