"""Preview module for rendered frames.

Components:
    display: Matplotlib-based preview window
    export: RGBA buffer to NumPy array and PNG export (Pillow)

Example:
    >>> from bandtracer.core.orchestrator import render
    >>> from bandtracer.preview import save_png, show_buffer
    >>>
    >>> buffer = render(400, 200)
    >>> save_png(buffer, 400, 200, "spheres.png")
    >>> show_buffer(buffer, 400, 200)
"""

from bandtracer.preview.display import show_buffer
from bandtracer.preview.export import buffer_to_array, save_png

__all__ = [
    "show_buffer",
    "buffer_to_array",
    "save_png",
]
