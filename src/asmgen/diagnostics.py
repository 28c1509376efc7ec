'''
clase Diagnostic, Origin y el acumulador Diagnostics (origen diferido)
'''

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Iterator, List, Optional, Literal, Tuple, TypeVar

T = TypeVar("T")

# Severidad de los diagnósticos
Severity = Literal["error", "warning"]

_SEV_TO_LABEL = {
    "error": "ERROR",
    "warning": "WARNING",
}

UNKNOWN_FILE = "[unknown]"

@dataclass(frozen=True)
class Origin:
    """Fuente de un diagnóstico: identificador de archivo y línea (base 0)."""
    file: str = UNKNOWN_FILE
    line: int = 0

    def __str__(self) -> str:
        return f"{self.file}:{self.line + 1}"

@dataclass(frozen=True)
class Diagnostic:
    """Estructura de un diagnóstico para reportar problemas.

    Abarca errores y advertencias, con origen opcional (archivo y línea),
    columna opcional (base 0) y un mensaje de ayuda (pista) para orientar
    la corrección.
    """
    severity: Severity
    message: str
    origin: Optional[Origin] = None
    col: Optional[int] = None
    hint: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    def __str__(self) -> str:
        loc = ""
        if self.origin is not None:
            loc = str(self.origin)
            if self.col is not None:
                loc += f":{self.col + 1}"
            loc += ": "
        sev = _SEV_TO_LABEL.get(self.severity, str(self.severity).upper())
        core = f"{sev}: {self.message}"
        if self.hint:
            core += f"  (hint: {self.hint})"
        return loc + core

def error(message: str, *, origin: Origin | None = None, col: int | None = None,
          hint: str | None = None) -> Diagnostic:
    """Crea un diagnóstico de tipo error."""
    return Diagnostic("error", message, origin, col, hint)

def warning(message: str, *, origin: Origin | None = None, col: int | None = None,
            hint: str | None = None) -> Diagnostic:
    """Crea un diagnóstico de tipo advertencia."""
    return Diagnostic("warning", message, origin, col, hint)

def with_origin(diags: Iterable[Diagnostic], origin: Optional[Origin]) -> List[Diagnostic]:
    """Completa el origen de los diagnósticos que no lo tienen.

    Los que ya traen origen se conservan tal cual.
    """
    if origin is None:
        return list(diags)
    return [d if d.origin is not None else replace(d, origin=origin) for d in diags]

class Diagnostics:
    """Acumulador ordenado de diagnósticos.

    `origin` es el origen actual: se asigna a cada diagnóstico nuevo. Una
    suboperación puede registrar sin origen (``Diagnostics()``) y el llamador
    lo completa al fusionar con :meth:`merge`.
    """

    def __init__(self, origin: Optional[Origin] = None):
        self.origin = origin
        self._items: List[Diagnostic] = []

    def warning(self, message: str, *, col: int | None = None, hint: str | None = None) -> None:
        self._items.append(warning(message, origin=self.origin, col=col, hint=hint))

    def error(self, message: str, *, col: int | None = None, hint: str | None = None) -> None:
        self._items.append(error(message, origin=self.origin, col=col, hint=hint))

    def merge(self, other: Iterable[Diagnostic], origin: Optional[Origin] = None) -> None:
        """Incorpora `other`, completando el origen con `origin` o con el actual."""
        self._items.extend(with_origin(other, origin if origin is not None else self.origin))

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self._items)

    def into_result(self, factory: Callable[[], T]) -> Tuple[Optional[T], List[Diagnostic]]:
        """Devuelve (valor, diagnósticos); el valor es None si hubo algún error."""
        value = None if self.has_errors else factory()
        return value, list(self._items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)
