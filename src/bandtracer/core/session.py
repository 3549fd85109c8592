"""A render session that re-renders on demand without overlapping.

A viewer asks for a new frame whenever its surface changes size. Renders are
slow, so the session lets only one run at a time: a request that arrives
while a render is in progress is dropped, not queued. A size carried by a
dropped request is still recorded, so the next request renders at the
latest size once the running render finishes.

The scene seed sequence is generated once when the session is created and
reused for every render, so resizing shows the same spheres at a new
resolution.

Example:
    >>> from bandtracer.core.session import RenderSession
    >>> frames = []
    >>> session = RenderSession(64, 32, callback=lambda w, h, buf: frames.append(buf))
    >>> session.request()
    True
    >>> session.resize(128, 64)
    True
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from bandtracer.config import RenderSettings
from bandtracer.core.orchestrator import render
from bandtracer.scene.builder import make_random_sequence

logger = logging.getLogger(__name__)

# Callback receives (width, height, rgba_buffer) after each completed render
RenderCallback = Callable[[int, int, bytes], None]

# Signature of bandtracer.core.orchestrator.render
RenderFunction = Callable[..., bytes]


class RenderSession:
    """Single-flight owner of the rendered image.

    Attributes:
        worker_count: Bands per render, passed through to ``render``.
        settings: Render settings shared by every frame.
        callback: Called with (width, height, buffer) after each render.
    """

    def __init__(
        self,
        width: int,
        height: int,
        worker_count: int | None = None,
        settings: RenderSettings | None = None,
        callback: RenderCallback | None = None,
        render_fn: RenderFunction = render,
        random_sequence: tuple[float, ...] | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            width: Initial image width in pixels.
            height: Initial image height in pixels.
            worker_count: Bands per render. None means one per CPU.
            settings: Render settings. Defaults to RenderSettings().
            callback: Receives each finished frame.
            render_fn: Function producing a frame; ``render`` by default.
            random_sequence: Scene seed sequence. Generated if None.

        Raises:
            ValueError: If width or height is not positive.
        """
        _check_size(width, height)
        self._width = width
        self._height = height
        self.worker_count = worker_count
        self.settings = settings if settings is not None else RenderSettings()
        self.callback = callback
        self._render_fn = render_fn
        if random_sequence is None:
            random_sequence = make_random_sequence(self.settings.sequence_length)
        self._random_sequence = tuple(random_sequence)
        self._lock = threading.Lock()
        # Guards the size and the dropped-request count
        self._state_lock = threading.Lock()
        self._buffer: bytes | None = None
        self._dropped = 0

    @property
    def width(self) -> int:
        with self._state_lock:
            return self._width

    @property
    def height(self) -> int:
        with self._state_lock:
            return self._height

    @property
    def random_sequence(self) -> tuple[float, ...]:
        """The seed sequence every render of this session uses."""
        return self._random_sequence

    @property
    def buffer(self) -> bytes | None:
        """The most recent completed frame, or None before the first."""
        return self._buffer

    @property
    def is_rendering(self) -> bool:
        return self._lock.locked()

    @property
    def dropped_requests(self) -> int:
        """Number of requests ignored because a render was in progress."""
        with self._state_lock:
            return self._dropped

    def request(self, width: int | None = None, height: int | None = None) -> bool:
        """Render a frame unless one is already in progress.

        Blocks for the duration of the render it starts. A new size is
        recorded even when the render itself is dropped.

        Args:
            width: New width, or None to keep the current one.
            height: New height, or None to keep the current one.

        Returns:
            True if a frame was rendered, False if the request was dropped.

        Raises:
            ValueError: If the requested size is not positive.
        """
        with self._state_lock:
            if width is not None or height is not None:
                new_width = self._width if width is None else width
                new_height = self._height if height is None else height
                _check_size(new_width, new_height)
                self._width, self._height = new_width, new_height

        if not self._lock.acquire(blocking=False):
            with self._state_lock:
                self._dropped += 1
            logger.debug("Render in progress, dropping request")
            return False

        try:
            with self._state_lock:
                frame_width, frame_height = self._width, self._height

            buffer = self._render_fn(
                frame_width,
                frame_height,
                self.worker_count,
                settings=self.settings,
                random_sequence=self._random_sequence,
            )
            self._buffer = buffer
            if self.callback is not None:
                self.callback(frame_width, frame_height, buffer)
        finally:
            self._lock.release()
        return True

    def resize(self, width: int, height: int) -> bool:
        """Request a frame at a new size."""
        return self.request(width, height)


def _check_size(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"Image size must be positive, got {width}x{height}")
