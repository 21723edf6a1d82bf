"""Hardware aware preview backends for the live levels preview."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from array import array
from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

from .preview import FilterGraphDescriptor
from .raster import RasterBuffer

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from PySide6.QtOpenGL import QOpenGLFramebufferObject

_LOGGER = logging.getLogger(__name__)


class PreviewSession(ABC):
    """Represents a backend specific rendering context.

    Sub-classes encapsulate any state that needs to live between individual
    preview renders.  The CPU backend simply wraps the immutable source
    raster, while the OpenGL backend retains the uploaded texture and the
    destination framebuffer.
    """

    @abstractmethod
    def dispose(self) -> None:
        """Release resources associated with the session."""


class PreviewBackend(ABC):
    """Abstract preview backend evaluating a :class:`FilterGraphDescriptor`."""

    tier_name: str = "unknown"
    """Human readable tier label (e.g. ``"OpenGL"`` or ``"CPU"``)."""

    supports_realtime: bool = False
    """Whether the backend can render fast enough to run on the UI thread."""

    @abstractmethod
    def create_session(self, raster: RasterBuffer) -> PreviewSession:
        """Create a rendering session for *raster*.

        The controller keeps the returned session alive for as long as the
        image remains loaded, so every parameter change only re-renders.
        """

    @abstractmethod
    def render(self, session: PreviewSession, descriptor: FilterGraphDescriptor) -> RasterBuffer:
        """Evaluate *descriptor* over the session image and return the frame."""

    def dispose_session(self, session: PreviewSession) -> None:
        """Release resources owned by *session*."""

        session.dispose()


@dataclass
class _CpuPreviewSession(PreviewSession):
    """Store the source raster for the CPU backend."""

    raster: RasterBuffer

    def dispose(self) -> None:  # pragma: no cover - nothing to free
        return


class _CpuPreviewBackend(PreviewBackend):
    """CPU implementation evaluating the descriptor with NumPy."""

    tier_name = "CPU"
    supports_realtime = False

    def create_session(self, raster: RasterBuffer) -> PreviewSession:
        return _CpuPreviewSession(raster)

    def render(self, session: PreviewSession, descriptor: FilterGraphDescriptor) -> RasterBuffer:
        assert isinstance(session, _CpuPreviewSession)
        raster = session.raster
        if raster.is_empty:
            return RasterBuffer.blank(raster.width, raster.height)
        return RasterBuffer(raster.width, raster.height, descriptor.evaluate(raster.pixels))


_MAX_CACHED_PROGRAMS = 8

# Raw OpenGL enums used with ``QOpenGLFunctions``.
_GL_COLOR_BUFFER_BIT = 0x00004000
_GL_TEXTURE0 = 0x84C0
_GL_TEXTURE_2D = 0x0DE1
_GL_FLOAT = 0x1406
_GL_TRIANGLE_STRIP = 0x0005

_QUAD_VERTEX_SHADER = """
#version 330 core
layout (location = 0) in vec2 a_position;
out vec2 v_texcoord;
void main() {
    gl_Position = vec4(a_position, 0.0, 1.0);
    v_texcoord = a_position * 0.5 + 0.5;
}
"""


def _open_offscreen_context():
    """Return a current ``(context, surface)`` pair for an OpenGL 3.3 core profile.

    Raises :class:`RuntimeError` when the platform cannot provide one.
    """

    from PySide6.QtGui import QOffscreenSurface, QOpenGLContext, QSurfaceFormat

    requested = QSurfaceFormat()
    requested.setVersion(3, 3)
    requested.setProfile(QSurfaceFormat.OpenGLContextProfile.CoreProfile)
    requested.setRenderableType(QSurfaceFormat.RenderableType.OpenGL)

    context = QOpenGLContext()
    context.setFormat(requested)
    if not context.create():
        raise RuntimeError("Failed to create OpenGL context")

    surface = QOffscreenSurface()
    surface.setFormat(context.format())
    surface.create()
    if not surface.isValid():
        raise RuntimeError("OpenGL offscreen surface is invalid")
    if not context.makeCurrent(surface):
        raise RuntimeError("Failed to make OpenGL context current")
    return context, surface


class _OpenGlPreviewBackend(PreviewBackend):
    """OpenGL backend compiling the descriptor into a fragment shader.

    Each distinct descriptor becomes one shader program whose coefficients are
    baked into the source, so a render is a single full-screen quad draw.
    """

    tier_name = "OpenGL"
    supports_realtime = True

    def __init__(self) -> None:
        from PySide6.QtOpenGL import QOpenGLBuffer

        super().__init__()
        self._context, self._surface = _open_offscreen_context()
        self._gl = self._context.functions()
        self._programs: dict[str, object] = {}

        corners = array("f", [-1.0, -1.0, 1.0, -1.0, -1.0, 1.0, 1.0, 1.0])
        self._quad = QOpenGLBuffer(QOpenGLBuffer.Type.VertexBuffer)
        if not (self._quad.create() and self._quad.bind()):
            self._context.doneCurrent()
            raise RuntimeError("Failed to prepare the OpenGL quad buffer")
        payload = corners.tobytes()
        self._quad.allocate(payload, len(payload))
        self._quad.release()
        self._context.doneCurrent()

    @classmethod
    def is_available(cls) -> bool:
        """Return ``True`` if an OpenGL 3.3 rendering context can be created."""

        try:
            context, _surface = _open_offscreen_context()
        except ImportError:
            return False
        except Exception:
            _LOGGER.debug("OpenGL availability check failed", exc_info=True)
            return False
        context.doneCurrent()
        return True

    def _activate(self, purpose: str) -> None:
        if not self._context.makeCurrent(self._surface):
            raise RuntimeError(f"Failed to activate OpenGL context for {purpose}")

    def _program_for(self, descriptor: FilterGraphDescriptor):
        from PySide6.QtOpenGL import QOpenGLShader, QOpenGLShaderProgram

        source = descriptor.fragment_shader_source()
        cached = self._programs.get(source)
        if cached is not None:
            return cached

        program = QOpenGLShaderProgram()
        stages = (
            (QOpenGLShader.ShaderTypeBit.Vertex, _QUAD_VERTEX_SHADER, "vertex"),
            (QOpenGLShader.ShaderTypeBit.Fragment, source, "fragment"),
        )
        for kind, code, label in stages:
            if not program.addShaderFromSourceCode(kind, code):
                raise RuntimeError(f"Failed to compile {label} shader: {program.log()}")
        if not program.link():
            raise RuntimeError(f"Failed to link levels shader program: {program.log()}")

        # Oldest curve first out.
        if len(self._programs) >= _MAX_CACHED_PROGRAMS:
            del self._programs[next(iter(self._programs))]
        self._programs[source] = program
        return program

    def create_session(self, raster: RasterBuffer) -> PreviewSession:
        from PySide6.QtGui import QPainter
        from PySide6.QtOpenGL import QOpenGLFramebufferObject

        from .filters.utils import qimage_from_raster

        if raster.is_empty:
            return _OpenGlPreviewSession(raster.width, raster.height)

        self._activate("session creation")
        try:
            source = QOpenGLFramebufferObject(raster.width, raster.height)
            painter = QPainter(source)
            try:
                painter.drawImage(0, 0, qimage_from_raster(raster))
            finally:
                painter.end()
            target = QOpenGLFramebufferObject(raster.width, raster.height)
        finally:
            self._context.doneCurrent()
        return _OpenGlPreviewSession(raster.width, raster.height, source, target)

    def render(self, session: PreviewSession, descriptor: FilterGraphDescriptor) -> RasterBuffer:
        from .filters.utils import raster_from_qimage

        gl_session = cast(_OpenGlPreviewSession, session)
        target = gl_session.target
        if target is None or gl_session.source is None:
            return RasterBuffer.blank(gl_session.width, gl_session.height)

        self._activate("preview rendering")
        gl = self._gl
        try:
            program = self._program_for(descriptor)
            if not target.bind():
                raise RuntimeError("Failed to bind the preview framebuffer")
            gl.glViewport(0, 0, gl_session.width, gl_session.height)
            gl.glClearColor(0.0, 0.0, 0.0, 0.0)
            gl.glClear(_GL_COLOR_BUFFER_BIT)

            if not (program.bind() and self._quad.bind()):
                raise RuntimeError("Failed to bind the levels shader inputs")
            gl.glActiveTexture(_GL_TEXTURE0)
            gl.glBindTexture(_GL_TEXTURE_2D, int(gl_session.source.texture()))
            program.setUniformValue("uSourceTexture", 0)
            program.enableAttributeArray(0)
            program.setAttributeBuffer(0, _GL_FLOAT, 0, 2, 2 * 4)
            gl.glDrawArrays(_GL_TRIANGLE_STRIP, 0, 4)
            program.disableAttributeArray(0)
            self._quad.release()
            program.release()

            frame = target.toImage(True)
        finally:
            if target.isBound():
                target.release()
            self._context.doneCurrent()

        return raster_from_qimage(frame)

    def dispose_session(self, session: PreviewSession) -> None:
        # Framebuffer wrappers free their GL objects on destruction, which
        # needs the context to be current.
        current = self._context.makeCurrent(self._surface)
        try:
            session.dispose()
        finally:
            if current:
                self._context.doneCurrent()


@dataclass
class _OpenGlPreviewSession(PreviewSession):
    """Source and destination framebuffers of one preview image."""

    width: int
    height: int
    source: "QOpenGLFramebufferObject | None" = None
    target: "QOpenGLFramebufferObject | None" = None

    def dispose(self) -> None:
        self.source = None
        self.target = None


def select_preview_backend(*, allow_gpu: bool = True) -> PreviewBackend:
    """Return the most capable preview backend available on the system."""

    if allow_gpu and _OpenGlPreviewBackend.is_available():
        try:
            backend = _OpenGlPreviewBackend()
        except Exception as exc:  # pragma: no cover - depends on the driver
            _LOGGER.warning("Failed to initialise OpenGL backend: %s", exc)
        else:
            _LOGGER.info("Using OpenGL preview backend")
            return backend

    _LOGGER.info("Using CPU preview backend")
    return _CpuPreviewBackend()


def fallback_preview_backend(previous: PreviewBackend) -> PreviewBackend:
    """Return a safer backend after *previous* reports a fatal failure."""

    if isinstance(previous, _OpenGlPreviewBackend):
        _LOGGER.info("Falling back from OpenGL preview backend to CPU implementation")
    return _CpuPreviewBackend()


__all__ = [
    "PreviewBackend",
    "PreviewSession",
    "fallback_preview_backend",
    "select_preview_backend",
]
