"""Declarative description of the tone curve for real-time renderers.

The live preview never walks source pixels in application code.  Instead it
describes the same three stages the export applier runs (linear stretch,
gamma, linear remap) as a small filter graph that a rendering backend evaluates
per pixel.  The descriptor is inert data: it can be emitted as an SVG filter,
as a GLSL fragment shader, or as plain JSON.

Rendering backends quantise with their own rounding, typically
round-to-nearest in single precision, while the export applier floors in
double precision.  The two paths therefore agree within
:data:`PREVIEW_TOLERANCE` levels per channel and the export stays
authoritative.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from .curve_solver import CurveParameters

PREVIEW_TOLERANCE = 1
"""Maximum per-channel difference between preview and export, in 8-bit levels."""

COLOR_CHANNELS = ("R", "G", "B")


@dataclass(frozen=True)
class LinearFunction:
    """``C' = slope * C + intercept`` (SVG ``type="linear"``)."""

    slope: float = 1.0
    intercept: float = 0.0

    kind = "linear"

    def attributes(self) -> dict[str, float]:
        return {"slope": self.slope, "intercept": self.intercept}


@dataclass(frozen=True)
class GammaFunction:
    """``C' = amplitude * C ** exponent + offset`` (SVG ``type="gamma"``)."""

    amplitude: float = 1.0
    exponent: float = 1.0
    offset: float = 0.0

    kind = "gamma"

    def attributes(self) -> dict[str, float]:
        return {"amplitude": self.amplitude, "exponent": self.exponent, "offset": self.offset}


TransferFunction = LinearFunction | GammaFunction


@dataclass(frozen=True)
class ComponentTransfer:
    """One per-channel stage of the filter graph; alpha is always identity."""

    name: str
    red: TransferFunction
    green: TransferFunction
    blue: TransferFunction

    @property
    def functions(self) -> tuple[TransferFunction, TransferFunction, TransferFunction]:
        return (self.red, self.green, self.blue)


@dataclass(frozen=True)
class FilterGraphDescriptor:
    """Ordered component-transfer stages describing the live preview."""

    stages: tuple[ComponentTransfer, ...]

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        return {
            "stages": [
                {
                    "name": stage.name,
                    "channels": {
                        channel: {"type": function.kind, **function.attributes()}
                        for channel, function in zip(COLOR_CHANNELS, stage.functions)
                    },
                }
                for stage in self.stages
            ]
        }

    def to_svg_filter(self, filter_id: str = "levels-complex") -> str:
        """Return an SVG ``<filter>`` element built from ``feComponentTransfer``."""

        lines = [f'<filter id="{filter_id}" color-interpolation-filters="sRGB">']
        for stage in self.stages:
            lines.append(f"  <!-- {stage.name} -->")
            lines.append("  <feComponentTransfer>")
            for channel, function in zip(COLOR_CHANNELS, stage.functions):
                attrs = " ".join(
                    f'{key}="{value:.9g}"' for key, value in function.attributes().items()
                )
                lines.append(f'    <feFunc{channel} type="{function.kind}" {attrs} />')
            lines.append("  </feComponentTransfer>")
        lines.append("</filter>")
        return "\n".join(lines)

    def fragment_shader_source(self) -> str:
        """Return GLSL 330 source evaluating the graph with per-stage clamping."""

        body: list[str] = []
        for index, stage in enumerate(self.stages):
            body.append(f"    // {stage.name}")
            for component, function in zip("rgb", stage.functions):
                body.append(f"    c.{component} = {_glsl_expression(function, f'c.{component}')};")
            body.append("    c.rgb = clamp(c.rgb, 0.0, 1.0);")
        statements = "\n".join(body)
        return f"""
#version 330 core
out vec4 FragColor;
in vec2 v_texcoord;
uniform sampler2D uSourceTexture;
void main() {{
    vec4 c = texture(uSourceTexture, v_texcoord);
{statements}
    FragColor = c;
}}
"""

    # ------------------------------------------------------------------
    # Reference evaluation
    # ------------------------------------------------------------------
    def evaluate(self, pixels: np.ndarray, *, dtype: type = np.float64) -> np.ndarray:
        """Evaluate the graph on ``(..., 4)`` ``uint8`` *pixels* like a renderer would.

        Every stage clamps into ``[0, 1]`` and the result is quantised with
        round-to-nearest, as filter backends do.  Alpha passes through.  Pass
        ``dtype=np.float32`` to model single-precision GPU arithmetic, which
        can drift further than :data:`PREVIEW_TOLERANCE` on extreme curves.
        """

        source = np.asarray(pixels, dtype=np.uint8)
        result = np.array(source, copy=True)
        colour = source[..., :3].astype(dtype) / dtype(255.0)
        for stage in self.stages:
            for channel, function in enumerate(stage.functions):
                colour[..., channel] = _evaluate_function(function, colour[..., channel], dtype)
            np.clip(colour, 0.0, 1.0, out=colour)
        result[..., :3] = np.rint(colour * dtype(255.0)).astype(np.uint8)
        return result


def _glsl_float(value: float) -> str:
    text = f"{float(value):.9g}"
    if "e" not in text and "." not in text and "inf" not in text and "nan" not in text:
        text += ".0"
    return text


def _glsl_expression(function: TransferFunction, operand: str) -> str:
    if isinstance(function, LinearFunction):
        return f"{operand} * {_glsl_float(function.slope)} + {_glsl_float(function.intercept)}"
    return (
        f"{_glsl_float(function.amplitude)} * pow(max({operand}, 0.0), "
        f"{_glsl_float(function.exponent)}) + {_glsl_float(function.offset)}"
    )


def _evaluate_function(function: TransferFunction, values: np.ndarray, dtype: type) -> np.ndarray:
    if isinstance(function, LinearFunction):
        return values * dtype(function.slope) + dtype(function.intercept)
    powered = np.power(np.maximum(values, dtype(0.0)), dtype(function.exponent))
    return dtype(function.amplitude) * powered + dtype(function.offset)


def describe_preview(
    params_r: CurveParameters,
    params_g: CurveParameters,
    params_b: CurveParameters,
) -> FilterGraphDescriptor:
    """Return the filter graph realising the three channel curves."""

    channels = (params_r, params_g, params_b)
    stretch = ComponentTransfer(
        "linear stretch",
        *(LinearFunction(p.input_slope, p.input_intercept) for p in channels),
    )
    gamma = ComponentTransfer(
        "gamma",
        *(GammaFunction(1.0, p.exponent, 0.0) for p in channels),
    )
    remap = ComponentTransfer(
        "output remap",
        *(LinearFunction(p.output_slope, p.output_intercept) for p in channels),
    )
    return FilterGraphDescriptor((stretch, gamma, remap))


__all__ = [
    "ComponentTransfer",
    "FilterGraphDescriptor",
    "GammaFunction",
    "LinearFunction",
    "PREVIEW_TOLERANCE",
    "describe_preview",
]
