import pytest

onnx = pytest.importorskip("onnx")

from onnx import TensorProto, helper  # noqa: E402

from embed_header.cli import main  # noqa: E402
from embed_header.errors import ModelCheckError  # noqa: E402
from embed_header.onnx_check import check_model  # noqa: E402


def _identity_model_bytes() -> bytes:
    x = helper.make_tensor_value_info("x", TensorProto.FLOAT, [1, 4])
    y = helper.make_tensor_value_info("y", TensorProto.FLOAT, [1, 4])
    node = helper.make_node("Identity", ["x"], ["y"])
    graph = helper.make_graph([node], "identity", [x], [y])
    model = helper.make_model(graph, opset_imports=[helper.make_opsetid("", 13)])
    return model.SerializeToString()


def test_check_valid_model():
    summary = check_model(_identity_model_bytes(), "identity.onnx")

    assert summary.node_count == 1
    assert summary.opsets == ("ai.onnx:13",)
    assert "1 nodes" in summary.describe()


@pytest.mark.parametrize("data", [b"", b"not an onnx model"])
def test_check_rejects_garbage(data):
    with pytest.raises(ModelCheckError, match="garbage.onnx"):
        check_model(data, "garbage.onnx")


def test_cli_check_onnx(input_file, tmp_path):
    src = input_file("identity.onnx", _identity_model_bytes())
    out = tmp_path / "identity.hpp"

    rc = main(["-i", str(src), "-o", str(out), "-b", "--check-onnx", "-n", "idet::internal"])

    assert rc == 0
    assert "constexpr std::array<std::uint8_t," in out.read_text()


def test_cli_check_onnx_failure_writes_nothing(input_file, tmp_path, caplog):
    src = input_file("broken.onnx", b"not an onnx model")
    out = tmp_path / "broken.hpp"

    rc = main(["-i", str(src), "-o", str(out), "-b", "--check-onnx"])

    assert rc == 1
    assert not out.exists()
    assert "broken.onnx" in caplog.text
