'''
plantillas de codificación: átomos (byte, registro, inmediato) y pasos
'''

from __future__ import annotations
from dataclasses import dataclass
from typing import Union

# ---- Átomos ----

@dataclass(frozen=True)
class Byte:
    """Valor fijo de 8 bits."""
    value: int

@dataclass(frozen=True)
class CapturedRegister:
    """N-ésimo registro capturado (por orden de aparición en el patrón)."""
    index: int

@dataclass(frozen=True)
class CapturedImmediate:
    """N-ésimo inmediato capturado, con el ancho en bits declarado en el patrón."""
    index: int
    width: int

CodegenData = Union[Byte, CapturedRegister, CapturedImmediate]

# ---- Pasos ----

@dataclass(frozen=True)
class Data:
    """Escribe el átomo como byte completo (o width/8 bytes si es inmediato)."""
    atom: CodegenData

@dataclass(frozen=True)
class UpperLower:
    """Escribe dos átomos en los nibbles alto y bajo de un único byte."""
    upper: CodegenData
    lower: CodegenData

Codegen = Union[Data, UpperLower]

def byte(b: int) -> Data: return Data(Byte(b))
def register(r: int) -> Data: return Data(CapturedRegister(r))
def immediate(i: int, width: int) -> Data: return Data(CapturedImmediate(i, width))

def _describe_atom(atom: CodegenData) -> str:
    if isinstance(atom, Byte):
        return f"0x{atom.value:02x}"
    if isinstance(atom, CapturedRegister):
        return f"r{atom.index}"
    return f"i{atom.index}"

def describe(step: Codegen) -> str:
    """Vuelve a escribir un paso con la sintaxis de la configuración."""
    if isinstance(step, UpperLower):
        return f"[{_describe_atom(step.upper)} | {_describe_atom(step.lower)}]"
    return _describe_atom(step.atom)
