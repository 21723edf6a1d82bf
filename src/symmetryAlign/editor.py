"""Editing session tying the tone engine to one loaded image."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from .config import DEFAULT_CONFIG, EngineConfig
from .core.alignment import AlignmentState, compose_export_canvas
from .core.auto_levels import apply_auto_levels
from .core.curve_solver import CurveParameters
from .core.filters import apply_curve
from .core.histogram import build_histogram
from .core.interaction import LevelsControlModel
from .core.levels import EditTarget, LevelsSession, LevelsSettings
from .core.preview import FilterGraphDescriptor, describe_preview
from .core.preview_backends import (
    PreviewBackend,
    PreviewSession,
    fallback_preview_backend,
    select_preview_backend,
)
from .core.raster import RasterBuffer
from .io.image_source import load_raster

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportJob:
    """Immutable snapshot of everything one export pass needs.

    Interactive edits made after the snapshot was taken cannot reach an
    in-flight export because the curve parameters are copied by value.
    """

    source: RasterBuffer
    params: tuple[CurveParameters, CurveParameters, CurveParameters]
    offset_x: float
    offset_y: float
    rotation: float
    executor: str = "auto"
    padding: float = 1.2
    export_format: str = "PNG"

    def render(self) -> RasterBuffer:
        """Run the full-resolution pass and compose the export canvas."""

        adjusted = apply_curve(self.source, *self.params, executor=self.executor)
        alignment = AlignmentState(self.offset_x, self.offset_y, self.rotation)
        return compose_export_canvas(adjusted, alignment, padding=self.padding)


class EditorSession:
    """Own the levels, alignment and histogram state of the loaded image."""

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG, *, allow_gpu: bool = True) -> None:
        self._config = config
        self._allow_gpu = allow_gpu
        self._preview_backend: PreviewBackend | None = None
        self._preview_session: PreviewSession | None = None
        self._raster: RasterBuffer | None = None
        self._levels = LevelsSession()
        self._alignment = AlignmentState()
        self._controls = LevelsControlModel(
            self._levels,
            track_width=config.track_width,
            hit_radius=config.hit_radius,
        )
        self._histogram: np.ndarray | None = None
        self._histogram_target: EditTarget | None = None

    # ------------------------------------------------------------------
    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def raster(self) -> RasterBuffer | None:
        return self._raster

    @property
    def levels(self) -> LevelsSession:
        return self._levels

    @property
    def alignment(self) -> AlignmentState:
        return self._alignment

    @property
    def controls(self) -> LevelsControlModel:
        return self._controls

    @property
    def preview_backend(self) -> PreviewBackend | None:
        return self._preview_backend

    def has_image(self) -> bool:
        return self._raster is not None

    # ------------------------------------------------------------------
    def load(self, raster: RasterBuffer) -> None:
        """Adopt *raster* and reset levels and alignment to identity."""

        self._drop_preview_session()
        self._raster = raster
        self._levels.reset()
        self._alignment.reset()
        self._histogram = None
        self._histogram_target = None
        LOGGER.debug("Editor session loaded a %dx%d raster", raster.width, raster.height)

    def load_file(self, path: Path) -> RasterBuffer:
        raster = load_raster(path)
        self.load(raster)
        return raster

    def clear(self) -> None:
        self._drop_preview_session()
        self._raster = None
        self._histogram = None
        self._histogram_target = None
        self._levels.reset()
        self._alignment.reset()

    def select_target(self, target: EditTarget) -> bool:
        return self._controls.select_target(target)

    def histogram(self) -> np.ndarray:
        """Return the histogram of the selected channel, rebuilding on change."""

        target = self._controls.target
        if self._histogram is None or self._histogram_target is not target:
            if self._raster is None:
                self._histogram = np.zeros(256, dtype=np.int64)
            else:
                self._histogram = build_histogram(
                    self._raster, self._config.sample_width, target.channel_mode
                )
            self._histogram_target = target
        return self._histogram

    def auto_levels(self) -> LevelsSettings:
        """Apply percentile auto levels to the selected channel."""

        return apply_auto_levels(
            self._levels,
            self._controls.target,
            self.histogram(),
            self._config.clip_fraction,
        )

    def preview_descriptor(self) -> FilterGraphDescriptor:
        return describe_preview(*self._levels.curve_parameters())

    def render_preview(self) -> RasterBuffer:
        """Render the live preview of the loaded image.

        A backend that fails with :class:`RuntimeError` is replaced by its
        fallback and the frame is rendered again on the new backend.
        """

        if self._raster is None:
            raise RuntimeError("No image is loaded")
        descriptor = self.preview_descriptor()
        if self._preview_backend is None:
            self._preview_backend = select_preview_backend(allow_gpu=self._allow_gpu)
        try:
            return self._render_with(self._preview_backend, descriptor)
        except RuntimeError:
            failed = self._preview_backend
            LOGGER.warning("%s preview backend failed", failed.tier_name, exc_info=True)
            self._drop_preview_session()
            self._preview_backend = fallback_preview_backend(failed)
            return self._render_with(self._preview_backend, descriptor)

    def _render_with(
        self, backend: PreviewBackend, descriptor: FilterGraphDescriptor
    ) -> RasterBuffer:
        if self._preview_session is None:
            self._preview_session = backend.create_session(self._raster)
        return backend.render(self._preview_session, descriptor)

    def _drop_preview_session(self) -> None:
        if self._preview_session is not None and self._preview_backend is not None:
            self._preview_backend.dispose_session(self._preview_session)
        self._preview_session = None

    def export_job(self) -> ExportJob:
        """Snapshot the current state for a full-resolution export."""

        if self._raster is None:
            raise RuntimeError("No image is loaded")
        return ExportJob(
            source=self._raster,
            params=self._levels.curve_parameters(),
            offset_x=self._alignment.offset_x,
            offset_y=self._alignment.offset_y,
            rotation=self._alignment.rotation,
            executor=self._config.executor,
            padding=self._config.export_padding,
            export_format=self._config.export_format,
        )


__all__ = ["EditorSession", "ExportJob"]
