import dataclasses
from typing import Tuple

import onnx
from google.protobuf.message import DecodeError

from embed_header.errors import ModelCheckError


def _domain_norm(d: str) -> str:
    # In ONNX, empty domain usually means "ai.onnx"
    return d if d else "ai.onnx"


@dataclasses.dataclass(frozen=True)
class ModelSummary:
    ir_version: int
    opsets: Tuple[str, ...]
    node_count: int

    def describe(self) -> str:
        opsets = ", ".join(self.opsets) if self.opsets else "<none>"
        return f"IR version {self.ir_version}, opsets [{opsets}], {self.node_count} nodes"


def check_model(data: bytes, source: str) -> ModelSummary:
    """Parse `data` as an ONNX model and run the ONNX checker on it.

    Raises ModelCheckError if the bytes are not a loadable, well-formed model.
    """
    if not data:
        raise ModelCheckError(f"ONNX model is empty: {source}")
    try:
        model = onnx.load_model_from_string(data)
    except DecodeError as exc:
        raise ModelCheckError(f"Not a valid ONNX model: {source}: {exc}") from exc

    try:
        onnx.checker.check_model(model)
    except onnx.checker.ValidationError as exc:
        raise ModelCheckError(f"ONNX model failed validation: {source}: {exc}") from exc

    opsets = tuple(f"{_domain_norm(imp.domain)}:{imp.version}" for imp in model.opset_import)
    return ModelSummary(
        ir_version=model.ir_version,
        opsets=opsets,
        node_count=len(model.graph.node),
    )
