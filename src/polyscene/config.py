"""
Configuration & Constants
=========================
This module serves as the central registry for scene defaults.

Why is this file needed?
------------------------
1. Abstraction: Scene constants (camera, lights, colors, the contour itself)
   live in one place instead of being scattered through the view code.
2. Overrides: A few values can be changed through environment variables
   without touching the code (see `ViewerConfig.from_env`).

Environment variables:
    POLYSCENE_TEXTURE: Texture URL or file path.
    POLYSCENE_TRIANGULATOR: "vtk" (default) or "gmsh".
    POLYSCENE_FRAME_INTERVAL_MS: Redraw interval in milliseconds.
    POLYSCENE_LOG_LEVEL: Logging level name (DEBUG, INFO, ...).
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


# --- Input data ---
DEFAULT_CONTOUR: Tuple[Tuple[float, float], ...] = (
    (154.0, 0.0),
    (140.0, 10.0),
    (150.0, 40.0),
)
DEFAULT_TEXTURE_URL: str = "https://i.ibb.co/2k3BbfS/test.png"
DEFAULT_TRIANGULATOR: str = "vtk"

# --- Scene ---
BACKGROUND_COLOR: str = "#666666"
GRID_SIZE: float = 1000.0
GRID_DIVISIONS: int = 10
GRID_CENTER_COLOR: str = "#444444"
GRID_COLOR: str = "#888888"

DIRECTIONAL_LIGHT_INTENSITY: float = 1.5
DIRECTIONAL_LIGHT_POSITION: Tuple[float, float, float] = (100.0, 100.0, 100.0)
AMBIENT_LIGHT_INTENSITY: float = 0.5
LIGHT_COLOR: str = "white"

POINT_COLOR: str = "yellow"
POINT_SIZE: float = 2.0

# --- Camera ---
CAMERA_FOV: float = 60.0  # degrees, vertical
CAMERA_NEAR: float = 1.0
CAMERA_FAR: float = 2000.0
CAMERA_DISTANCE: float = 150.0  # set on all three axes

# --- Render loop ---
FRAME_INTERVAL_MS: int = 16  # ~60 Hz
DEFAULT_WINDOW_SIZE: Tuple[int, int] = (1024, 768)


@dataclass
class ViewerConfig:
    """All knobs of the viewer. Defaults reproduce the reference scene."""
    contour: Tuple[Tuple[float, float], ...] = DEFAULT_CONTOUR
    holes: Tuple[Tuple[Tuple[float, float], ...], ...] = ()
    texture_source: Optional[str] = DEFAULT_TEXTURE_URL
    triangulator: str = DEFAULT_TRIANGULATOR

    background_color: str = BACKGROUND_COLOR
    grid_size: float = GRID_SIZE
    grid_divisions: int = GRID_DIVISIONS
    grid_center_color: str = GRID_CENTER_COLOR
    grid_color: str = GRID_COLOR

    directional_light_intensity: float = DIRECTIONAL_LIGHT_INTENSITY
    directional_light_position: Tuple[float, float, float] = DIRECTIONAL_LIGHT_POSITION
    ambient_light_intensity: float = AMBIENT_LIGHT_INTENSITY
    light_color: str = LIGHT_COLOR

    point_color: str = POINT_COLOR
    point_size: float = POINT_SIZE

    camera_fov: float = CAMERA_FOV
    camera_near: float = CAMERA_NEAR
    camera_far: float = CAMERA_FAR
    camera_distance: float = CAMERA_DISTANCE

    frame_interval_ms: int = FRAME_INTERVAL_MS
    anti_aliasing: bool = True
    window_size: Tuple[int, int] = field(default=DEFAULT_WINDOW_SIZE)

    @property
    def camera_position(self) -> Tuple[float, float, float]:
        d = self.camera_distance
        return d, d, d

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> ViewerConfig:
        """Builds a config from defaults plus POLYSCENE_* environment overrides."""
        env = os.environ if environ is None else environ
        cfg = cls()

        texture = env.get("POLYSCENE_TEXTURE")
        if texture is not None:
            # Empty string disables the texture
            cfg.texture_source = texture.strip() or None

        triangulator = env.get("POLYSCENE_TRIANGULATOR")
        if triangulator:
            cfg.triangulator = triangulator.strip().lower()

        interval = env.get("POLYSCENE_FRAME_INTERVAL_MS")
        if interval:
            try:
                cfg.frame_interval_ms = max(1, int(interval))
            except ValueError:
                logger.warning(f"Ignoring invalid POLYSCENE_FRAME_INTERVAL_MS={interval!r}")

        return cfg


def log_level_from_env(environ: Optional[Mapping[str, str]] = None, default: int = logging.INFO) -> int:
    """Reads POLYSCENE_LOG_LEVEL as a logging level, falling back to `default`."""
    env = os.environ if environ is None else environ
    name = env.get("POLYSCENE_LOG_LEVEL", "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    if isinstance(level, int):
        return level
    logger.warning(f"Unknown POLYSCENE_LOG_LEVEL={name!r}, using {logging.getLevelName(default)}.")
    return default
