"""
polyscene: an interactive 3D viewer for a triangulated, textured polygon.
"""
__version__ = "0.1.0"
