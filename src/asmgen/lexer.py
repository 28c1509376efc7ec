from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Literal, Optional

from .regs import reg_num

TokenKind = Literal[
    "ident", "register", "immediate", "integer", "label", "directive", "string",
    "arrow", "comma", "colon", "pipe", "lbracket", "rbracket", "error",
]

# Order matters: the first alternative that matches wins.
TOKEN_RE = re.compile(r"""
      (?P<skip>[ \t\r]+|//.*|/\*.*?\*/)
    | (?P<arrow>->)
    | (?P<integer>0[xX][0-9a-fA-F]+|0[bB][01]+|\d+)
    | (?P<register>[rR]\d+(?!\w))
    | (?P<immediate>[iI]\d+(?!\w))
    | (?P<label>[_a-zA-Z]\w*:)
    | (?P<ident>[_a-zA-Z]\w*)
    | (?P<directive>\.[_a-zA-Z0-9]\w*)
    | (?P<string>"[^"]*")
    | (?P<comma>,)
    | (?P<colon>:)
    | (?P<pipe>\|)
    | (?P<lbracket>\[)
    | (?P<rbracket>\])
    | (?P<error>.)
""", re.VERBOSE)

@dataclass(frozen=True)
class Lexeme:
    """One token with the exact source slice it came from."""
    kind: TokenKind
    text: str
    col: int
    value: Optional[int] = None

def parse_int(text: str) -> int:
    """Parse a decimal, 0x hex or 0b binary literal."""
    t = text.lower()
    if t.startswith("0x"):
        return int(t[2:], 16)
    if t.startswith("0b"):
        return int(t[2:], 2)
    return int(t, 10)

def tokenize(line: str) -> Iterator[Lexeme]:
    """Lazily scan one line, dropping blanks and comments."""
    for m in TOKEN_RE.finditer(line):
        kind = m.lastgroup
        if kind == "skip":
            continue
        text = m.group()
        value = None
        if kind == "integer":
            value = parse_int(text)
        elif kind == "register":
            value = reg_num(text)
        elif kind == "immediate":
            value = int(text[1:])
        yield Lexeme(kind, text, m.start(), value)  # type: ignore[arg-type]

class Lexer:
    """Restartable token sequence over one line: every iteration rescans."""

    def __init__(self, line: str):
        self.line = line

    def __iter__(self) -> Iterator[Lexeme]:
        return tokenize(self.line)

def join_syntax(lexemes: Iterable[Lexeme]) -> str:
    """Rebuild a human readable pattern: single spaces, no space before ',' or around ':'."""
    out = ""
    for lx in lexemes:
        if not out or out.endswith(":") or lx.kind in ("comma", "colon"):
            out += lx.text
        else:
            out += " " + lx.text
    return out.lower()

def split_lines(text: str) -> List[str]:
    """Split on '\\n' only, dropping a trailing '\\r' and the empty piece after a final newline."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [l[:-1] if l.endswith("\r") else l for l in lines]
