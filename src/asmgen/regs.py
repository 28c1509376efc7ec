'''
registros rN: numeración y límite del espacio de 4 bits
'''

from __future__ import annotations

# Los registros se codifican en un nibble
REG_BITS = 4
MAX_REGISTER = (1 << REG_BITS) - 1

def reg_num(token: str) -> int:
    """Devuelve el número N de un token 'rN' (mayúsculas o minúsculas) o lanza ValueError."""
    t = token.strip().lower()
    if t.startswith("r") and t[1:].isdigit():
        return int(t[1:])
    raise ValueError(f"invalid register: {token}")

def in_bounds(num: int) -> bool:
    """Indica si el registro cabe en el espacio de registros (0..15)."""
    return 0 <= num <= MAX_REGISTER
