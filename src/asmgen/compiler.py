# src/asmgen/compiler.py
from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, List, Optional, Tuple

from .lexer import Lexeme, tokenize, join_syntax, split_lines
from .codegen import (
    Codegen, CodegenData, Byte, CapturedRegister, CapturedImmediate, UpperLower,
    byte, register, immediate,
)
from .isa import Assembler, Instruction, TransitionTable, Slot
from .diagnostics import Diagnostic, Diagnostics, Origin, UNKNOWN_FILE
from .utils import u8, nibble

# Los inmediatos capturados son enteros sin signo de 64 bits
MAX_IMMEDIATE_WIDTH = 64

# ---------------- Construcción del autómata ----------------

@dataclass
class _InstructionBuilder:
    name: str
    states: List[TransitionTable] = field(default_factory=lambda: [TransitionTable()])
    syntaxes: List[str] = field(default_factory=list)

    def walk(self, state: int, slot: Slot) -> int:
        """Sigue la transición `slot` desde `state`, creando el estado destino si no existe."""
        nxt = getattr(self.states[state], slot)
        if nxt is not None:
            return nxt
        nxt = len(self.states)
        self.states[state] = replace(self.states[state], **{slot: nxt})
        self.states.append(TransitionTable())
        return nxt

    def accept(self, state: int, codegen: List[Codegen]) -> None:
        self.states[state] = replace(self.states[state], accept_codegen=tuple(codegen))

    def build(self) -> Instruction:
        return Instruction(self.name, tuple(self.states), tuple(self.syntaxes))

@dataclass
class _Shape:
    """Resultado de recorrer la parte izquierda de '->'."""
    state: int
    registers: int
    immediates: List[int]   # ancho en bits de cada inmediato, por posición
    lexemes: List[Lexeme]

# ---------------- Forma del patrón ----------------

def _expect_width(tokens: Iterator[Lexeme], imm: Lexeme, log: Diagnostics,
                  lexemes: List[Lexeme]) -> Optional[int]:
    colon = next(tokens, None)
    if colon is None or colon.kind != "colon":
        got = f", but got '{colon.text}'" if colon is not None else ""
        log.error(f"expected ':' and a width after immediate '{imm.text}'{got}", col=imm.col)
        return None
    width = next(tokens, None)
    if width is None or width.kind != "integer":
        if width is None:
            log.error("expected width of immediate", col=colon.col)
        else:
            log.error(f"expected width of immediate, but got '{width.text}'", col=width.col)
        return None
    if not 0 < width.value <= MAX_IMMEDIATE_WIDTH:
        log.error(f"width of immediate '{imm.text}' must be between 1 and {MAX_IMMEDIATE_WIDTH} bits, "
                  f"but got {width.text}", col=width.col)
        return None
    lexemes.extend((imm, colon, width))
    return width.value

def _parse_shape(tokens: Iterator[Lexeme], head: Lexeme, builder: _InstructionBuilder,
                 log: Diagnostics) -> Optional[_Shape]:
    state = Instruction.START
    registers = 0
    immediates: List[int] = []
    lexemes = [head]

    for tok in tokens:
        if tok.kind == "register":
            if tok.value != registers:
                log.warning(f"registers are parsed in the order they appear regardless of number; "
                            f"{tok.text} will correspond to r{registers} in codegen", col=tok.col)
            state = builder.walk(state, "register")
            registers += 1
            lexemes.append(tok)

        elif tok.kind == "immediate":
            if tok.value != len(immediates):
                log.warning(f"immediates are parsed in the order they appear regardless of number; "
                            f"{tok.text} will correspond to i{len(immediates)} in codegen", col=tok.col)
            width = _expect_width(tokens, tok, log, lexemes)
            if width is None:
                return None
            immediates.append(width)
            state = builder.walk(state, "immediate")

        elif tok.kind == "comma":
            state = builder.walk(state, "comma")
            lexemes.append(tok)

        elif tok.kind == "arrow":
            return _Shape(state, registers, immediates, lexemes)

        else:
            log.error(f"unexpected token in instruction pattern: '{tok.text}'", col=tok.col)
            return None

    log.error("expected '->' following an instruction pattern")
    return None

# ---------------- Plantilla de código ----------------

def _bracket_value(tokens: Iterator[Lexeme], after: str, name: str, shape: _Shape,
                   log: Diagnostics) -> Optional[CodegenData]:
    tok = next(tokens, None)
    if tok is None:
        log.error(f"expected a literal, register or immediate after '{after}'")
        return None
    if tok.kind == "integer":
        if tok.value > 0xF:
            log.warning(f"{tok.text} is larger than 4 bits and will be truncated", col=tok.col)
        return Byte(nibble(tok.value))
    if tok.kind == "register":
        if tok.value >= shape.registers:
            log.error(f"'{name}' uses register {tok.value} which is not given in the instruction pattern",
                      col=tok.col)
        return CapturedRegister(tok.value)
    if tok.kind == "immediate":
        if tok.value >= len(shape.immediates):
            log.error(f"'{name}' uses immediate {tok.value} which is not given in the instruction pattern",
                      col=tok.col)
            return None
        width = shape.immediates[tok.value]
        if width != 4:
            log.error(f"width of immediate in bracket group must be 4, but {tok.text} is {width} bits wide",
                      col=tok.col)
            return None
        return CapturedImmediate(tok.value, width)
    log.error(f"expected a literal, register or immediate after '{after}', but got '{tok.text}'", col=tok.col)
    return None

def _expect_symbol(tokens: Iterator[Lexeme], kind: str, symbol: str, log: Diagnostics) -> bool:
    tok = next(tokens, None)
    if tok is None:
        log.error(f"expected '{symbol}' in bracket group")
        return False
    if tok.kind != kind:
        log.error(f"expected '{symbol}' in bracket group, but got '{tok.text}'", col=tok.col)
        return False
    return True

def codegen_brackets(tokens: Iterator[Lexeme], name: str, shape: _Shape) -> Tuple[Optional[UpperLower], List[Diagnostic]]:
    """Parsea `<valor> | <valor> ]` tras un '['.

    Registra sin origen; el llamador completa el origen al fusionar.
    Devuelve (None, diags) si el grupo está mal formado.
    """
    log = Diagnostics()
    upper = _bracket_value(tokens, "[", name, shape, log)
    if upper is None or not _expect_symbol(tokens, "pipe", "|", log):
        return None, list(log)
    lower = _bracket_value(tokens, "|", name, shape, log)
    if lower is None or not _expect_symbol(tokens, "rbracket", "]", log):
        return None, list(log)
    return UpperLower(upper, lower), list(log)

def _parse_codegen(tokens: Iterator[Lexeme], name: str, shape: _Shape,
                   log: Diagnostics) -> Optional[List[Codegen]]:
    codegen: List[Codegen] = []
    for tok in tokens:
        if tok.kind == "integer":
            if tok.value > 0xFF:
                log.warning(f"{tok.text} is larger than 8 bits and will be truncated", col=tok.col)
            codegen.append(byte(u8(tok.value)))

        elif tok.kind == "immediate":
            if tok.value >= len(shape.immediates):
                log.error(f"'{name}' uses immediate {tok.value} which is not given in the instruction pattern",
                          col=tok.col)
                continue
            width = shape.immediates[tok.value]
            if width % 8 != 0:
                log.error(f"immediate width must be byte aligned outside of a bracket group, "
                          f"but {tok.text} is {width} bits wide", col=tok.col)
                continue
            codegen.append(immediate(tok.value, width))

        elif tok.kind == "register":
            if tok.value >= shape.registers:
                log.error(f"'{name}' uses register {tok.value} which is not given in the instruction pattern",
                          col=tok.col)
            codegen.append(register(tok.value))

        elif tok.kind == "lbracket":
            group, diags = codegen_brackets(tokens, name, shape)
            log.merge(diags)
            if group is None:
                return None
            codegen.append(group)

        else:
            log.error(f"codegen only supports literal values, registers, and bracket groups, but got '{tok.text}'",
                      col=tok.col)
            return None
    return codegen

# ---------------- Compilador principal ----------------

def compile_config(text: str, *, filename: Optional[str] = None) -> Tuple[Optional[Assembler], List[Diagnostic]]:
    """
    Compila la configuración línea a línea. Cada línea no vacía es un patrón:

        <mnemónico> [rN | iN:W | ,]* -> [literal | rN | iN | '[' v '|' v ']']*

    Los patrones de un mismo mnemónico comparten un único DFA (prefijos comunes).
    Devuelve (Assembler o None si hubo algún error, diagnósticos).
    """
    file = filename or UNKNOWN_FILE
    table: Dict[str, _InstructionBuilder] = {}
    log = Diagnostics()

    for lineno, raw in enumerate(split_lines(text)):
        log.origin = Origin(file, lineno)
        tokens = tokenize(raw)

        head = next(tokens, None)
        if head is None:
            continue
        if head.kind != "ident":
            log.error("only instruction patterns are supported in the assembler config", col=head.col)
            continue

        name = head.text.lower()
        builder = table.setdefault(name, _InstructionBuilder(name))

        shape = _parse_shape(tokens, head, builder, log)
        if shape is None:
            continue
        codegen = _parse_codegen(tokens, name, shape, log)
        if codegen is None:
            continue

        syntax = join_syntax(shape.lexemes)
        if builder.states[shape.state].accept_codegen is not None:
            log.error(f"conflicting patterns for instruction '{name}'",
                      hint=f"'{syntax}' has the same operand shape as an earlier pattern")
            continue
        builder.accept(shape.state, codegen)
        builder.syntaxes.append(syntax)

    return log.into_result(lambda: Assembler({k: b.build() for k, b in table.items()}))
