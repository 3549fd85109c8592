"""Tests for the single-flight render session.

The render function is replaced by a stub, so these tests do not touch
Taichi.
"""

import threading

import pytest

from bandtracer.config import RenderSettings
from bandtracer.core.session import RenderSession


class StubRenderer:
    """Records calls and returns a blank buffer of the right size."""

    def __init__(self):
        self.calls = []
        self.on_render = None

    def __call__(self, width, height, worker_count, *, settings, random_sequence):
        self.calls.append((width, height, worker_count, settings, random_sequence))
        if self.on_render is not None:
            self.on_render()
        return bytes(width * height * 4)


@pytest.fixture
def renderer():
    return StubRenderer()


class TestRequest:
    """Tests for RenderSession.request."""

    def test_request_renders_and_stores_buffer(self, renderer):
        settings = RenderSettings(samples=2)
        session = RenderSession(4, 3, worker_count=2, settings=settings, render_fn=renderer)

        assert session.buffer is None
        assert session.request() is True

        assert len(session.buffer) == 4 * 3 * 4
        width, height, workers, used_settings, sequence = renderer.calls[0]
        assert (width, height, workers) == (4, 3, 2)
        assert used_settings is settings
        assert sequence == session.random_sequence

    def test_callback_receives_frame(self, renderer):
        frames = []
        session = RenderSession(
            5, 2, callback=lambda w, h, buf: frames.append((w, h, buf)), render_fn=renderer
        )

        session.request()

        assert frames == [(5, 2, bytes(5 * 2 * 4))]

    def test_request_during_render_is_dropped(self, renderer):
        """Test that a request arriving mid-render is ignored, not queued."""
        session = RenderSession(4, 4, render_fn=renderer)
        nested = []

        def request_again():
            assert session.is_rendering
            nested.append(session.request(8, 8))

        renderer.on_render = request_again
        assert session.request() is True

        assert nested == [False]
        assert session.dropped_requests == 1
        assert len(renderer.calls) == 1
        assert (session.width, session.height) == (8, 8)
        assert not session.is_rendering

    def test_resize_during_render_is_kept(self, renderer):
        """Test that a dropped resize still sets the size of the next frame."""
        session = RenderSession(4, 4, render_fn=renderer)

        def resize_once():
            renderer.on_render = None
            assert session.resize(64, 32) is False

        renderer.on_render = resize_once
        session.request()

        assert (session.width, session.height) == (64, 32)
        assert session.request() is True
        assert [(c[0], c[1]) for c in renderer.calls] == [(4, 4), (64, 32)]

    def test_invalid_resize_during_render_raises(self, renderer):
        session = RenderSession(4, 4, render_fn=renderer)
        errors = []

        def resize_invalid():
            with pytest.raises(ValueError):
                session.resize(0, 8)
            errors.append(True)

        renderer.on_render = resize_invalid
        session.request()

        assert errors == [True]
        assert (session.width, session.height) == (4, 4)
        assert session.dropped_requests == 0

    def test_concurrent_requests_counted(self):
        """Test that requests from other threads mid-render are all counted."""
        started = threading.Event()
        release = threading.Event()

        def blocking_render(width, height, worker_count, *, settings, random_sequence):
            started.set()
            release.wait(timeout=10)
            return bytes(width * height * 4)

        session = RenderSession(2, 2, render_fn=blocking_render)
        renderer_thread = threading.Thread(target=session.request)
        renderer_thread.start()
        assert started.wait(timeout=10)

        results = []
        callers = [
            threading.Thread(target=lambda: results.append(session.request()))
            for _ in range(8)
        ]
        for caller in callers:
            caller.start()
        for caller in callers:
            caller.join(timeout=10)
        release.set()
        renderer_thread.join(timeout=10)

        assert results == [False] * 8
        assert session.dropped_requests == 8
        assert session.buffer == bytes(2 * 2 * 4)

    def test_next_request_after_render_runs(self, renderer):
        session = RenderSession(4, 4, render_fn=renderer)
        session.request()
        session.request()
        assert len(renderer.calls) == 2
        assert session.dropped_requests == 0

    def test_lock_released_when_render_fails(self):
        def failing_render(*args, **kwargs):
            raise RuntimeError("boom")

        session = RenderSession(4, 4, render_fn=failing_render)
        with pytest.raises(RuntimeError):
            session.request()
        assert not session.is_rendering


class TestResize:
    """Tests for resizing a session."""

    def test_resize_reuses_sequence(self, renderer):
        session = RenderSession(4, 4, render_fn=renderer)
        session.request()
        assert session.resize(16, 8) is True

        assert (session.width, session.height) == (16, 8)
        first, second = renderer.calls
        assert (second[0], second[1]) == (16, 8)
        assert first[4] is second[4]

    def test_request_with_single_dimension(self, renderer):
        session = RenderSession(4, 4, render_fn=renderer)
        session.request(width=10)
        assert (session.width, session.height) == (10, 4)

    @pytest.mark.parametrize("width, height", [(0, 4), (4, -1)])
    def test_invalid_resize_raises(self, renderer, width, height):
        session = RenderSession(4, 4, render_fn=renderer)
        with pytest.raises(ValueError):
            session.resize(width, height)
        assert (session.width, session.height) == (4, 4)
        assert renderer.calls == []


class TestConstruction:
    """Tests for RenderSession construction."""

    def test_sequence_generated_once(self, renderer):
        session = RenderSession(4, 4, settings=RenderSettings(sequence_length=50), render_fn=renderer)
        assert isinstance(session.random_sequence, tuple)
        assert len(session.random_sequence) == 50

    def test_given_sequence_is_kept(self, renderer):
        session = RenderSession(4, 4, render_fn=renderer, random_sequence=[0.1, 0.2])
        assert session.random_sequence == (0.1, 0.2)

    def test_invalid_size_raises(self, renderer):
        with pytest.raises(ValueError):
            RenderSession(0, 4, render_fn=renderer)
