"""Monte Carlo path tracer for sphere scenes, written with Taichi.

The renderer traces jittered camera rays through a list of spheres, scatters
them according to each surface's material (diffuse, metal or glass) and
averages the results per pixel. Independent full-image passes can be merged
into a final image.

Subpackages:
    core: Ray/vector utilities, the path-tracing integrator, image buffers and
        the multi-pass super-sampler
    geometry: Sphere primitive and ray-sphere intersection
    materials: Material variants and the kernel-side material table
    scene: Scene list, scene upload and nearest-hit queries
    camera: Thin-lens camera with depth of field
    preview: PPM/PNG export

Modules that declare Taichi fields must be imported after
``pathtracer.config.init_taichi()`` has been called.
"""

__version__ = "0.1.0"
