"""Embed arbitrary files into C++ headers as compile-time constants."""

from embed_header.errors import (
    EmbedError,
    EncodingError,
    InputReadError,
    InvalidArgumentsError,
    ModelCheckError,
    OutputWriteError,
)
from embed_header.render import ArrayStyle, Mode, RenderOptions, RenderedOutput, render

__version__ = "0.1.0"

__all__ = [
    "ArrayStyle",
    "EmbedError",
    "EncodingError",
    "InputReadError",
    "InvalidArgumentsError",
    "Mode",
    "ModelCheckError",
    "OutputWriteError",
    "RenderOptions",
    "RenderedOutput",
    "render",
]
