"""Matplotlib-based preview of rendered RGBA buffers.

Example:
    >>> from bandtracer.core.orchestrator import render
    >>> from bandtracer.preview.display import show_buffer
    >>> buffer = render(200, 100)
    >>> show_buffer(buffer, 200, 100)
"""

from __future__ import annotations

from bandtracer.preview.export import buffer_to_array


def show_buffer(
    buffer: bytes,
    width: int,
    height: int,
    *,
    title: str | None = None,
    figsize: tuple[float, float] | None = None,
    block: bool = True,
) -> None:
    """Display a rendered frame in a Matplotlib figure.

    Args:
        buffer: ``width * height * 4`` bytes, row-major from the top row.
        width: Image width in pixels.
        height: Image height in pixels.
        title: Custom title (default shows the resolution).
        figsize: Figure size in inches. Follows the image aspect if None.
        block: Whether to block execution until the figure is closed.

    Raises:
        ValueError: If the buffer length does not match the size.
    """
    import matplotlib.pyplot as plt

    image = buffer_to_array(buffer, width, height)

    if figsize is None:
        figsize = (8.0, 8.0 * height / width)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(image)
    ax.axis("off")
    ax.set_title(title if title is not None else f"Render Preview - {width}x{height}")

    plt.tight_layout()
    plt.show(block=block)
