# src/asmgen/encoding.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from .lexer import Lexeme, tokenize, split_lines
from .codegen import Codegen, CodegenData, Byte, CapturedRegister, CapturedImmediate, UpperLower
from .isa import Assembler, Instruction
from .regs import in_bounds
from .utils import u8, le_bytes, pack_nibbles, fits_unsigned
from .diagnostics import Diagnostic, Diagnostics, Origin, UNKNOWN_FILE

# ---------------- Resultado de codificación ----------------

@dataclass(frozen=True)
class EncodeResult:
    data: Optional[bytes]     # None si hubo algún error
    diagnostics: List[Diagnostic]

# ---------------- Recorrido del autómata ----------------

def _match(ins: Instruction, tokens: Iterator[Lexeme], registers: List[int], immediates: List[int],
           log: Diagnostics) -> Optional[Tuple[Codegen, ...]]:
    """Recorre el DFA de `ins` capturando operandos; devuelve la plantilla aceptada o None."""
    state = Instruction.START
    for tok in tokens:
        if tok.kind == "integer":
            nxt = ins.step(state, "immediate")
            if nxt is None:
                log.error(f"unexpected immediate: '{tok.text}'", col=tok.col, hint=ins.syntax_listing())
                return None
            immediates.append(tok.value)

        elif tok.kind == "register":
            nxt = ins.step(state, "register")
            if nxt is None:
                log.error(f"unexpected register: '{tok.text}'", col=tok.col, hint=ins.syntax_listing())
                return None
            if not in_bounds(tok.value):
                log.error(f"register out of bounds: '{tok.text}'", col=tok.col)
                return None
            registers.append(tok.value)

        elif tok.kind == "comma":
            nxt = ins.step(state, "comma")
            if nxt is None:
                log.error("unexpected comma", col=tok.col, hint=ins.syntax_listing())
                return None

        else:
            log.error(f"unexpected token: '{tok.text}'", col=tok.col, hint=ins.syntax_listing())
            return None
        state = nxt

    codegen = ins.accepting(state)
    if codegen is None:
        log.error("syntax error", hint=ins.syntax_listing())
    return codegen

# ---------------- Evaluación de la plantilla ----------------

def _decode(atom: CodegenData, registers: Sequence[int], immediates: Sequence[int]) -> int:
    if isinstance(atom, Byte):
        return atom.value
    if isinstance(atom, CapturedRegister):
        return registers[atom.index]
    return u8(immediates[atom.index])

def _check_width(value: int, width: int, log: Diagnostics) -> None:
    if not fits_unsigned(value, width):
        log.warning(f"'{value}' will be truncated to {width} bits")

def _emit(codegen: Sequence[Codegen], registers: Sequence[int], immediates: Sequence[int],
          out: bytearray, log: Diagnostics) -> None:
    for step in codegen:
        if isinstance(step, UpperLower):
            for half in (step.upper, step.lower):
                if isinstance(half, CapturedImmediate):
                    _check_width(immediates[half.index], half.width, log)
            out.append(pack_nibbles(_decode(step.upper, registers, immediates),
                                    _decode(step.lower, registers, immediates)))
            continue
        atom = step.atom
        if isinstance(atom, CapturedImmediate):
            value = immediates[atom.index]
            _check_width(value, atom.width, log)
            out.extend(le_bytes(value, atom.width // 8))
        else:
            out.append(u8(_decode(atom, registers, immediates)))

# ---------------- Codificador principal ----------------

def encode(assembler: Assembler, text: str, *, filename: Optional[str] = None) -> EncodeResult:
    """Ensambla `text` con la tabla `assembler`, una instrucción por línea.

    Cada línea es independiente: un error abandona solo esa línea. El
    resultado trae bytes únicamente si ninguna línea produjo error.
    """
    file = filename or UNKNOWN_FILE
    log = Diagnostics()
    out = bytearray()
    registers: List[int] = []
    immediates: List[int] = []

    for lineno, raw in enumerate(split_lines(text)):
        log.origin = Origin(file, lineno)
        registers.clear()
        immediates.clear()
        tokens = tokenize(raw)

        head = next(tokens, None)
        if head is None:
            continue
        if head.kind != "ident":
            log.error(f"unexpected token: '{head.text}'", col=head.col)
            continue

        ins = assembler.get(head.text)
        if ins is None:
            log.error(f"unknown instruction: '{head.text}'", col=head.col)
            continue

        codegen = _match(ins, tokens, registers, immediates, log)
        if codegen is None:
            continue
        _emit(codegen, registers, immediates, out, log)

    data, diags = log.into_result(lambda: bytes(out))
    return EncodeResult(data=data, diagnostics=diags)
