'''
tabla de instrucciones compilada: autómata por mnemónico y plantillas de código
'''

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Literal, Mapping, Optional, Tuple

from .codegen import Codegen
from .diagnostics import Diagnostic

# Categorías de token con transición propia en el autómata
Slot = Literal["register", "immediate", "comma"]

@dataclass(frozen=True)
class TransitionTable:
    """Un estado del DFA.

    - register/immediate/comma: índice del estado siguiente, o None (rechazo)
    - accept_codegen: plantilla si el estado acepta, None si no
    """
    register: Optional[int] = None
    immediate: Optional[int] = None
    comma: Optional[int] = None
    accept_codegen: Optional[Tuple[Codegen, ...]] = None

@dataclass(frozen=True)
class Instruction:
    """Autómata de un mnemónico. El estado 0 es el estado inicial.

    `syntaxes` solo se conserva para los mensajes de diagnóstico.
    """
    name: str
    states: Tuple[TransitionTable, ...] = (TransitionTable(),)
    syntaxes: Tuple[str, ...] = ()

    START = 0

    def step(self, state: int, slot: Slot) -> Optional[int]:
        """Estado siguiente desde `state` con un token de categoría `slot`, o None."""
        return getattr(self.states[state], slot)

    def accepting(self, state: int) -> Optional[Tuple[Codegen, ...]]:
        return self.states[state].accept_codegen

    def syntax_listing(self) -> str:
        return f"available syntaxes for {self.name}: " + "; ".join(self.syntaxes)

@dataclass(frozen=True)
class Assembler:
    """Tabla inmutable mnemónico (en minúsculas) -> Instruction."""
    instructions: Mapping[str, Instruction] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "instructions", MappingProxyType(dict(self.instructions)))

    def get(self, mnemonic: str) -> Optional[Instruction]:
        """Busca un mnemónico sin distinguir mayúsculas."""
        return self.instructions.get(mnemonic.lower())

    def mnemonics(self) -> List[str]:
        return sorted(self.instructions)

    def assemble(self, source: str, *, filename: str | None = None) -> Tuple[Optional[bytes], List[Diagnostic]]:
        """Ensambla `source` línea a línea. Devuelve (bytes o None si hubo errores, diagnósticos)."""
        from .encoding import encode
        res = encode(self, source, filename=filename)
        return res.data, res.diagnostics
