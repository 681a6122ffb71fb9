"""
CHIP-8 instruction decoding
Field extraction shared by the dispatcher and the resume path, plus a
mnemonic disassembler for traces and error reports.
"""
from typing import NamedTuple


class Instruction(NamedTuple):
    word: int
    family: int  # top nibble
    x: int       # second nibble
    y: int       # third nibble
    n: int       # low nibble
    nn: int      # low byte
    nnn: int     # low 12 bits


def decode(word):
    """Split a 16-bit instruction word into its fields"""
    return Instruction(
        word=word,
        family=(word >> 12) & 0xF,
        x=(word >> 8) & 0xF,
        y=(word >> 4) & 0xF,
        n=word & 0xF,
        nn=word & 0xFF,
        nnn=word & 0xFFF,
    )


_ALU_MNEMONICS = {
    0x0: 'LD', 0x1: 'OR', 0x2: 'AND', 0x3: 'XOR',
    0x4: 'ADD', 0x5: 'SUB', 0x6: 'SHR', 0x7: 'SUBN', 0xE: 'SHL',
}

_F_MNEMONICS = {
    0x07: 'LD V{x}, DT',
    0x0A: 'LD V{x}, K',
    0x15: 'LD DT, V{x}',
    0x18: 'LD ST, V{x}',
    0x1E: 'ADD I, V{x}',
    0x29: 'LD F, V{x}',
    0x33: 'LD B, V{x}',
    0x55: 'LD [I], V{x}',
    0x65: 'LD V{x}, [I]',
}


def disassemble(word):
    """Return the mnemonic for an instruction word, or DW for unknown words"""
    ins = decode(word)
    f, x, y = ins.family, f"{ins.x:X}", f"{ins.y:X}"

    if word == 0x00E0:
        return 'CLS'
    elif word == 0x00EE:
        return 'RET'
    elif f == 0x1:
        return f'JP 0x{ins.nnn:03X}'
    elif f == 0x2:
        return f'CALL 0x{ins.nnn:03X}'
    elif f == 0x3:
        return f'SE V{x}, 0x{ins.nn:02X}'
    elif f == 0x4:
        return f'SNE V{x}, 0x{ins.nn:02X}'
    elif f == 0x5 and ins.n == 0:
        return f'SE V{x}, V{y}'
    elif f == 0x6:
        return f'LD V{x}, 0x{ins.nn:02X}'
    elif f == 0x7:
        return f'ADD V{x}, 0x{ins.nn:02X}'
    elif f == 0x8 and ins.n in _ALU_MNEMONICS:
        op = _ALU_MNEMONICS[ins.n]
        if op in ('SHR', 'SHL'):
            return f'{op} V{x}'
        return f'{op} V{x}, V{y}'
    elif f == 0x9 and ins.n == 0:
        return f'SNE V{x}, V{y}'
    elif f == 0xA:
        return f'LD I, 0x{ins.nnn:03X}'
    elif f == 0xB:
        return f'JP V0, 0x{ins.nnn:03X}'
    elif f == 0xC:
        return f'RND V{x}, 0x{ins.nn:02X}'
    elif f == 0xD:
        return f'DRW V{x}, V{y}, {ins.n}'
    elif f == 0xE and ins.nn == 0x9E:
        return f'SKP V{x}'
    elif f == 0xE and ins.nn == 0xA1:
        return f'SKNP V{x}'
    elif f == 0xF and ins.nn in _F_MNEMONICS:
        return _F_MNEMONICS[ins.nn].format(x=x)

    return f'DW 0x{word:04X}'
