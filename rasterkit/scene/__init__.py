"""
Scene rendering module.

Draws a validated scene.v1 config (canvas plus ordered shapes) onto a new
Surface under a single write lease.
"""

from rasterkit.scene.renderer import fill_poly, render_scene

__all__ = ["fill_poly", "render_scene"]
