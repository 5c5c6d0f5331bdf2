"""
PathForge - A Python Monte Carlo Path Tracer

Renders static scenes of spheres with:
- Diffuse, metal and glass materials
- Thin-lens depth of field
- A gradient sky as the only light source
- Reproducible, tile-parallel sampling
- PPM, BMP and PNG output
"""

__version__ = "0.1.0"
__author__ = "PathForge Team"

from .vec3 import Vec3, Point3, Color, lerp
from .ray import Ray
from .shapes import Sphere, HittableList, HitRecord, Hittable
from .materials import Material, Lambertian, Metal, Dielectric, ScatterResult, schlick
from .camera import Camera
from .environment import Environment, GradientEnvironment, SolidColorEnvironment
from .renderer import Renderer, RenderSettings, ray_color
from .tonemapping import linear_to_srgb, quantize, to_ldr
from .image_io import encode_ppm, encode_bmp, write_ppm, write_bmp, save_image, is_supported_format
from .scenes import random_scene, random_scene_camera, simple_scene, simple_scene_camera, build_scene
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene
