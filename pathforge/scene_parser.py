"""
Scene description language parser.

Supports a YAML-based scene description format (JSON is accepted too) with:
- Camera configuration
- Render settings
- Materials library
- Objects (spheres with materials)

Example scene file:
```yaml
camera:
  look_from: [13, 2, 3]
  look_at: [0, 0, 0]
  vfov: 20
  aperture: 0.1
  focus_dist: 10

render:
  width: 800
  height: 450
  samples: 100
  max_depth: 50
  seed: 7
  background: sky

materials:
  ground:
    type: lambertian
    albedo: [0.5, 0.5, 0.5]

  glass:
    type: dielectric
    ior: 1.5

objects:
  - type: sphere
    center: [0, -1000, 0]
    radius: 1000
    material: ground

  - type: sphere
    center: [0, 1, 0]
    radius: 1
    material: glass
```
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional, Tuple, Union

import yaml

from .vec3 import Vec3, Color
from .camera import Camera
from .shapes import Sphere, HittableList
from .materials import Material, Lambertian, Metal, Dielectric
from .environment import Environment, GradientEnvironment, SolidColorEnvironment
from .renderer import RenderSettings

logger = logging.getLogger(__name__)

SceneTuple = Tuple[HittableList, Camera, RenderSettings]


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


class SceneParser:
    """Parser for scene description files."""

    def __init__(self):
        self.materials: Dict[str, Material] = {}
        self.objects: HittableList = HittableList()
        self.camera: Optional[Camera] = None
        self.settings: Optional[RenderSettings] = None

    def parse_file(self, filepath: Union[str, Path]) -> SceneTuple:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (YAML or JSON)

        Returns:
            Tuple of (scene, camera, settings)
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        content = path.read_text()

        try:
            if path.suffix == '.json':
                data = json.loads(content)
            else:
                # YAML is a superset of JSON
                data = yaml.safe_load(content)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise SceneParseError(f"Cannot read scene file {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise SceneParseError(f"Scene file must contain a mapping: {filepath}")

        logger.info("Loading scene from %s", path)
        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> SceneTuple:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            Tuple of (scene, camera, settings)
        """
        self._expect(data, dict, "scene")
        try:
            # Settings first: the camera aspect ratio defaults to the image's
            self._parse_settings(self._expect(data.get('render') or {}, dict, "render"))

            # Materials next (objects reference them)
            if 'materials' in data:
                self._parse_materials(data['materials'] or {})

            if 'objects' in data:
                self._parse_objects(data['objects'] or [])

            self._parse_camera(self._expect(data.get('camera') or {}, dict, "camera"))
        except (ValueError, TypeError) as e:
            raise SceneParseError(str(e)) from e

        logger.debug(
            "Parsed scene: %d materials, %d objects",
            len(self.materials), len(self.objects)
        )
        return self.objects, self.camera, self.settings

    def _expect(self, data: Any, kind: type, what: str) -> Any:
        """Check the type of a scene section or entry."""
        if not isinstance(data, kind):
            raise SceneParseError(f"{what} must be a {kind.__name__}, got {type(data).__name__}: {data!r}")
        return data

    def _type_name(self, data: Dict[str, Any], default: str) -> str:
        type_name = data.get('type', default)
        if not isinstance(type_name, str):
            raise SceneParseError(f"type must be a string, got {type_name!r}")
        return type_name.lower()

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from various formats."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Vec3 must have 3 components, got {len(data)}")
            return Vec3(float(data[0]), float(data[1]), float(data[2]))
        elif isinstance(data, dict):
            return Vec3(
                float(data.get('x', 0)),
                float(data.get('y', 0)),
                float(data.get('z', 0))
            )
        else:
            raise SceneParseError(f"Cannot parse Vec3 from: {data}")

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from various formats."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Color must have 3 components, got {len(data)}")
            return Color(float(data[0]), float(data[1]), float(data[2]))
        elif isinstance(data, dict):
            return Color(
                float(data.get('r', 0)),
                float(data.get('g', 0)),
                float(data.get('b', 0))
            )
        elif isinstance(data, str):
            # Handle hex colors
            if data.startswith('#'):
                hex_color = data[1:]
                if len(hex_color) == 6:
                    r = int(hex_color[0:2], 16) / 255.0
                    g = int(hex_color[2:4], 16) / 255.0
                    b = int(hex_color[4:6], 16) / 255.0
                    return Color(r, g, b)
            raise SceneParseError(f"Cannot parse color from string: {data}")
        else:
            raise SceneParseError(f"Cannot parse Color from: {data}")

    def _parse_material(self, mat_data: Dict[str, Any]) -> Material:
        """Build one material from its description."""
        self._expect(mat_data, dict, "material")
        mat_type = self._type_name(mat_data, 'lambertian')

        if mat_type in ('lambertian', 'diffuse'):
            albedo = self._parse_color(mat_data.get('albedo', [0.5, 0.5, 0.5]))
            return Lambertian(albedo)

        elif mat_type in ('metal', 'reflective'):
            albedo = self._parse_color(mat_data.get('albedo', [0.8, 0.8, 0.8]))
            roughness = float(mat_data.get('roughness', 1.0))
            return Metal(albedo, roughness)

        elif mat_type == 'dielectric':
            albedo = self._parse_color(mat_data.get('albedo', [1, 1, 1]))
            ior = float(mat_data.get('ior', 1.0))
            return Dielectric(albedo, ior)

        raise SceneParseError(f"Unknown material type: {mat_type}")

    def _parse_materials(self, materials_data: Dict[str, Any]) -> None:
        """Parse materials section."""
        for name, mat_data in self._expect(materials_data, dict, "materials").items():
            self.materials[name] = self._parse_material(mat_data)

    def _get_material(self, mat_ref: Any) -> Material:
        """Get a material by name or inline definition."""
        if mat_ref is None:
            raise SceneParseError("Every object needs a material")
        if isinstance(mat_ref, str):
            if mat_ref not in self.materials:
                raise SceneParseError(f"Unknown material: {mat_ref}")
            return self.materials[mat_ref]
        elif isinstance(mat_ref, dict):
            return self._parse_material(mat_ref)
        else:
            raise SceneParseError(f"Invalid material reference: {mat_ref}")

    def _parse_objects(self, objects_data: list) -> None:
        """Parse objects section."""
        for obj_data in self._expect(objects_data, list, "objects"):
            self._expect(obj_data, dict, "object")
            obj_type = self._type_name(obj_data, 'sphere')
            material = self._get_material(obj_data.get('material'))

            if obj_type == 'sphere':
                center = self._parse_vec3(obj_data.get('center', [0, 0, 0]))
                radius = float(obj_data.get('radius', 1.0))
                self.objects.add(Sphere(center, radius, material))
            else:
                raise SceneParseError(f"Unknown object type: {obj_type}")

    def _parse_camera(self, camera_data: Dict[str, Any]) -> None:
        """Parse camera section."""
        look_from = self._parse_vec3(camera_data.get('look_from', [0, 0, 5]))
        look_at = self._parse_vec3(camera_data.get('look_at', [0, 0, 0]))
        vup = self._parse_vec3(camera_data.get('vup', [0, 1, 0]))
        vfov = float(camera_data.get('vfov', 60))
        default_aspect = self.settings.width / self.settings.height
        aspect_ratio = float(camera_data.get('aspect_ratio', default_aspect))
        aperture = float(camera_data.get('aperture', 0.0))
        focus_dist = float(camera_data.get('focus_dist', 1.0))

        self.camera = Camera(
            look_from=look_from,
            look_at=look_at,
            vup=vup,
            vfov=vfov,
            aspect_ratio=aspect_ratio,
            aperture=aperture,
            focus_dist=focus_dist
        )

    def _parse_background(self, data: Any) -> Environment:
        """Parse a background: 'sky', or a solid color."""
        if data == 'sky':
            return GradientEnvironment()
        return SolidColorEnvironment(self._parse_color(data))

    def _parse_settings(self, settings_data: Dict[str, Any]) -> None:
        """Parse render settings section."""
        seed = settings_data.get('seed')
        self.settings = RenderSettings(
            width=int(settings_data.get('width', 800)),
            height=int(settings_data.get('height', 450)),
            samples_per_pixel=int(settings_data.get('samples', 100)),
            max_depth=int(settings_data.get('max_depth', 50)),
            tile_size=int(settings_data.get('tile_size', 32)),
            num_threads=int(settings_data.get('threads', 0)),
            seed=int(seed) if seed is not None else None,
            environment=self._parse_background(settings_data.get('background', 'sky'))
        )


def load_scene(filepath: Union[str, Path]) -> SceneTuple:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file

    Returns:
        Tuple of (scene, camera, settings)
    """
    parser = SceneParser()
    return parser.parse_file(filepath)


def parse_scene(data: Dict[str, Any]) -> SceneTuple:
    """Convenience function to parse a scene from a dictionary.

    Args:
        data: Scene description dictionary

    Returns:
        Tuple of (scene, camera, settings)
    """
    parser = SceneParser()
    return parser.parse_dict(data)
