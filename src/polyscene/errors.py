"""
Exception hierarchy.

Model and controller code raises these; the view layer catches them at its
boundary, logs them and keeps the scene running.
"""


class PolysceneError(Exception):
    """Base class for all errors raised by polyscene."""


class ContourError(PolysceneError, ValueError):
    """The polygon contour cannot be turned into triangles."""


class InvalidContourError(ContourError):
    """The contour violates the triangulator precondition (simple polygon, >= 3 points)."""


class TriangulationError(ContourError):
    """The triangulation library returned an unusable result."""


class TextureLoadError(PolysceneError):
    """The texture bitmap could not be fetched or decoded."""
