'''
asmgen: ensamblador configurable (patrones de instrucción -> DFA -> bytes)
'''

from .compiler import compile_config
from .isa import Assembler, Instruction
from .diagnostics import Diagnostic, Origin

__all__ = ["compile_config", "Assembler", "Instruction", "Diagnostic", "Origin"]
