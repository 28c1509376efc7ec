'''
bit-twiddling (u8, nibbles, little-endian, comprobaciones de ancho)
'''

from __future__ import annotations

# Máscaras de byte y nibble
U8_MASK = 0xFF
NIBBLE_MASK = 0xF

def u8(x: int) -> int:
    """Fuerza el valor al rango de 8 bits sin signo."""
    return x & U8_MASK

def nibble(x: int) -> int:
    """Fuerza el valor al rango de 4 bits sin signo."""
    return x & NIBBLE_MASK

def pack_nibbles(upper: int, lower: int) -> int:
    """Empaqueta dos nibbles en un byte: (upper << 4) | lower."""
    return (nibble(upper) << 4) | nibble(lower)

def fits_unsigned(x: int, n: int) -> bool:
    """True si x no tiene más de n bits significativos."""
    if n < 0:
        raise ValueError("n must not be negative")
    return x.bit_length() <= n

def le_bytes(x: int, count: int) -> bytes:
    """Los `count` bytes bajos de x en orden little-endian (trunca el resto)."""
    if count < 0:
        raise ValueError("count must not be negative")
    return (x & ((1 << (8 * count)) - 1)).to_bytes(count, "little")

def to_hex8(x: int, *, prefix: bool = True) -> str:
    """Representación hexadecimal de 8 bits (cadena), con o sin prefijo 0x."""
    s = format(u8(x), "02x")
    return ("0x" + s) if prefix else s
