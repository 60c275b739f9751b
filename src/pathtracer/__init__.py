"""Offline path tracer built on Taichi.

This package renders scenes of spheres into 8-bit RGB images, with support for:
- Monte Carlo path tracing with a sky gradient as the only light
- Diffuse, metal and glass materials
- Moving spheres (motion blur) and a thin-lens camera (defocus blur)
- Bounding volume hierarchies over the scene
- Deterministic, seeded rendering with per-pixel random streams

Subpackages:
    core: Vector utilities, random streams, the integrator and the renderer
    geometry: Spheres, bounding boxes, object lists and BVH construction
    materials: Lambertian, metal and dielectric scattering
    scene: Scene upload, traversal and preset scenes
    camera: Thin-lens camera with ray generation
    preview: PPM and PNG export

Taichi must be initialized (see :func:`pathtracer.config.init_taichi`)
before importing any subpackage, since they declare Taichi fields.
"""

__version__ = "0.1.0"
