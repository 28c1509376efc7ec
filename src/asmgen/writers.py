from __future__ import annotations
from typing import List
from .utils import to_hex8

def to_hex_lines(data: bytes) -> List[str]:
    return [to_hex8(b) for b in data]

def write_hex(data: bytes, path: str) -> None:
    lines = to_hex_lines(data)
    with open(path, "w", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")

def write_bin(data: bytes, path: str) -> None:
    with open(path, "wb") as f:
        f.write(data)
