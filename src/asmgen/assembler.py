from __future__ import annotations
import argparse, sys
from typing import List, Optional, Tuple

from .compiler import compile_config
from .codegen import describe
from .diagnostics import Diagnostic
from .isa import Assembler
from .writers import write_hex, write_bin

def assemble_text(config: str, source: str, *, config_name: str | None = None,
                  filename: str | None = None) -> Tuple[Optional[bytes], List[Diagnostic], Optional[Assembler]]:
    """Compila la configuración y, si no hubo errores, ensambla el fuente.
    Devuelve (bytes o None, diagnostics_totales, assembler o None)."""
    assembler, diags = compile_config(config, filename=config_name)
    if assembler is None:
        return None, diags, None
    data, diags_asm = assembler.assemble(source, filename=filename)
    return data, list(diags) + list(diags_asm), assembler

def dump(assembler: Assembler) -> List[str]:
    """Resumen legible de la tabla compilada (mnemónicos, sintaxis y plantillas)."""
    out = []
    for name in assembler.mnemonics():
        ins = assembler.get(name)
        out.append(f"{name}: {len(ins.states)} states")
        for syntax in ins.syntaxes:
            out.append(f"  syntax: {syntax}")
        for i, st in enumerate(ins.states):
            if st.accept_codegen is not None:
                out.append(f"  state {i} -> " + " ".join(describe(c) for c in st.accept_codegen))
    return out

def _read(path: str) -> Optional[str]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as ex:
        print(f"ERROR: could not read {path}: {ex}", file=sys.stderr)
        return None

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Configurable assembler: instruction patterns -> bytes")
    ap.add_argument("config", help="instruction pattern file")
    ap.add_argument("source", help="assembly source file")
    ap.add_argument("output", help="output file with the raw bytes")
    ap.add_argument("--hex", dest="out_hex", metavar="OUT_HEX",
                    help="also write one 0xNN line per byte")
    ap.add_argument("--dump", action="store_true", help="print the compiled instruction table")
    args = ap.parse_args(argv)

    config = _read(args.config)
    if config is None:
        return 2
    source = _read(args.source)
    if source is None:
        return 2

    data, diags, assembler = assemble_text(config, source, config_name=args.config, filename=args.source)

    had_error = False
    for d in diags:
        # imprimimos todo; si hay error, devolvemos código 1
        print(d, file=sys.stderr)
        if d.is_error:
            had_error = True

    if args.dump and assembler is not None:
        for line in dump(assembler):
            print(line)

    if had_error or data is None:
        return 1

    try:
        write_bin(data, args.output)
        if args.out_hex:
            write_hex(data, args.out_hex)
    except OSError as ex:
        print(f"ERROR writing outputs: {ex}", file=sys.stderr)
        return 3

    print(f"OK: {len(data)} bytes -> {args.output}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
