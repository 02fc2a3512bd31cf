import re
from typing import List

import pytest

from embed_header.render import RenderedOutput

_HEX_RE = re.compile(r"0x([0-9a-f]{2}),")
_STR_ELEM_RE = re.compile(r'\\([0-7]{3})|\\(.)|([^\\])')
_SIMPLE = {"n": 0x0A, "r": 0x0D, "t": 0x09, "\\": 0x5C, '"': 0x22, "?": 0x3F}


def line_elements(line: str) -> List[int]:
    """Decode the element literals of one generated body line into byte values."""
    stripped = line.strip()
    if stripped.startswith('"'):
        assert stripped.endswith('"'), line
        out = []
        for octal, simple, plain in _STR_ELEM_RE.findall(stripped[1:-1]):
            if octal:
                out.append(int(octal, 8))
            elif simple:
                out.append(_SIMPLE[simple])
            else:
                assert plain != '"', line
                out.append(ord(plain))
        return out
    return [int(h, 16) for h in _HEX_RE.findall(stripped)]


def decode_body(rendered: RenderedOutput) -> bytes:
    return bytes(b for line in rendered.body for b in line_elements(line))


@pytest.fixture
def input_file(tmp_path):
    def make(name: str, data: bytes):
        p = tmp_path / name
        p.write_bytes(data)
        return p

    return make
