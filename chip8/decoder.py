"""
Classifies raw 16-bit instruction words into one of the Chip 8 operations.

A word is broken down into nibbles as follows:

   Bits:  15-12     11-8      7-4       3-0
          opcode      x        y         n

with nn being the low byte and nnn the low 12 bits. Whether a word is valid
depends only on its bit pattern, never on the state of the machine.
"""
from collections import namedtuple

from chip8.exception import InvalidInstructionException

# Masks used to pull the operand fields out of an instruction word
OPCODE_MASK = 0xF000
X_MASK = 0x0F00
Y_MASK = 0x00F0
N_MASK = 0x000F
NN_MASK = 0x00FF
NNN_MASK = 0x0FFF

# Instructions with opcode 0 are only valid as these exact words
ZERO_LOOKUP = {
    0x00E0: 'CLS',      # 00E0 - CLS
    0x00EE: 'RET',      # 00EE - RET
}

# Opcodes that are valid no matter what the remaining bits hold
OPERATION_LOOKUP = {
    0x1: 'JUMP',        # 1nnn - JUMP nnn
    0x2: 'CALL',        # 2nnn - CALL nnn
    0x3: 'SKE',         # 3snn - SKE  Vs, nn
    0x4: 'SKNE',        # 4snn - SKNE Vs, nn
    0x6: 'LOAD',        # 6snn - LOAD Vs, nn
    0x7: 'ADD',         # 7snn - ADD  Vs, nn
    0xA: 'LOADI',       # Annn - LOAD I, nnn
    0xB: 'JUMPI',       # Bnnn - JUMP V0 + nnn
    0xC: 'RAND',        # Ctnn - RAND Vt, nn
    0xD: 'DRAW',        # Dstn - DRAW Vs, Vt, n
}

# Opcodes 5 and 9 require a zero low nibble
REGISTER_SKIP_LOOKUP = {
    0x5: 'SKRE',        # 5st0 - SKE  Vs, Vt
    0x9: 'SKRNE',       # 9st0 - SKNE Vs, Vt
}

# Opcode 8, keyed on the low nibble
LOGICAL_LOOKUP = {
    0x0: 'MOVE',        # 8st0 - LOAD Vs, Vt
    0x1: 'OR',          # 8st1 - OR   Vs, Vt
    0x2: 'AND',         # 8st2 - AND  Vs, Vt
    0x3: 'XOR',         # 8st3 - XOR  Vs, Vt
    0x4: 'ADDR',        # 8st4 - ADD  Vs, Vt
    0x5: 'SUB',         # 8st5 - SUB  Vs, Vt
    0x6: 'SHR',         # 8st6 - SHR  Vs
    0x7: 'SUBN',        # 8st7 - SUBN Vs, Vt
    0xE: 'SHL',         # 8stE - SHL  Vs
}

# Opcode E, keyed on the low byte
KEYBOARD_LOOKUP = {
    0x9E: 'SKPR',       # Es9E - SKPR Vs
    0xA1: 'SKUP',       # EsA1 - SKUP Vs
}

# Opcode F, keyed on the low byte
MISC_LOOKUP = {
    0x07: 'MOVD',       # Ft07 - LOAD Vt, DELAY
    0x0A: 'KEYD',       # Ft0A - KEYD Vt
    0x15: 'SETD',       # Fs15 - LOAD DELAY, Vs
    0x18: 'SETS',       # Fs18 - LOAD SOUND, Vs
    0x1E: 'ADDI',       # Fs1E - ADD  I, Vs
    0x29: 'FONT',       # Fs29 - LOAD I, Vs
    0x33: 'BCD',        # Fs33 - BCD  Vs
    0x55: 'STOR',       # Fs55 - STOR [I], Vs
    0x65: 'READ',       # Fs65 - LOAD Vs, [I]
}

MNEMONICS = frozenset(
    list(ZERO_LOOKUP.values()) + list(OPERATION_LOOKUP.values()) +
    list(REGISTER_SKIP_LOOKUP.values()) + list(LOGICAL_LOOKUP.values()) +
    list(KEYBOARD_LOOKUP.values()) + list(MISC_LOOKUP.values()))

# Assembly-style rendering of every mnemonic, used for tracing
DISASSEMBLY_FORMATS = {
    'CLS': 'CLS',
    'RET': 'RET',
    'JUMP': 'JUMP {nnn:03X}',
    'CALL': 'CALL {nnn:03X}',
    'SKE': 'SKE  V{x:X}, {nn:02X}',
    'SKNE': 'SKNE V{x:X}, {nn:02X}',
    'SKRE': 'SKE  V{x:X}, V{y:X}',
    'SKRNE': 'SKNE V{x:X}, V{y:X}',
    'LOAD': 'LOAD V{x:X}, {nn:02X}',
    'ADD': 'ADD  V{x:X}, {nn:02X}',
    'MOVE': 'LOAD V{x:X}, V{y:X}',
    'OR': 'OR   V{x:X}, V{y:X}',
    'AND': 'AND  V{x:X}, V{y:X}',
    'XOR': 'XOR  V{x:X}, V{y:X}',
    'ADDR': 'ADD  V{x:X}, V{y:X}',
    'SUB': 'SUB  V{x:X}, V{y:X}',
    'SHR': 'SHR  V{x:X}, V{y:X}',
    'SUBN': 'SUBN V{x:X}, V{y:X}',
    'SHL': 'SHL  V{x:X}, V{y:X}',
    'LOADI': 'LOAD I, {nnn:03X}',
    'JUMPI': 'JUMP V0 + {nnn:03X}',
    'RAND': 'RAND V{x:X}, {nn:02X}',
    'DRAW': 'DRAW V{x:X}, V{y:X}, {n:X}',
    'SKPR': 'SKPR V{x:X}',
    'SKUP': 'SKUP V{x:X}',
    'MOVD': 'LOAD V{x:X}, DELAY',
    'KEYD': 'KEYD V{x:X}',
    'SETD': 'LOAD DELAY, V{x:X}',
    'SETS': 'LOAD SOUND, V{x:X}',
    'ADDI': 'ADD  I, V{x:X}',
    'FONT': 'LOAD I, FONT V{x:X}',
    'BCD': 'BCD  V{x:X}',
    'STOR': 'STOR [I], V{x:X}',
    'READ': 'LOAD V{x:X}, [I]',
}

Instruction = namedtuple(
    'Instruction', ['mnemonic', 'op_code', 'address', 'x', 'y', 'n', 'nn', 'nnn'])


def classify_instruction(op_code):
    """
    Returns the mnemonic for the instruction word, or None if the word does
    not match any recognized bit pattern.

    :param op_code: the 16-bit instruction word
    :return: the mnemonic string or None
    """
    operation = (op_code & OPCODE_MASK) >> 12

    if operation == 0x0:
        return ZERO_LOOKUP.get(op_code)

    if operation in OPERATION_LOOKUP:
        return OPERATION_LOOKUP[operation]

    if operation in REGISTER_SKIP_LOOKUP:
        if op_code & N_MASK == 0:
            return REGISTER_SKIP_LOOKUP[operation]
        return None

    if operation == 0x8:
        return LOGICAL_LOOKUP.get(op_code & N_MASK)

    if operation == 0xE:
        return KEYBOARD_LOOKUP.get(op_code & NN_MASK)

    return MISC_LOOKUP.get(op_code & NN_MASK)


def is_valid_instruction(op_code):
    """
    Returns True if the word is a recognized Chip 8 instruction.

    :param op_code: the 16-bit instruction word
    """
    return classify_instruction(op_code) is not None


def decode_instruction(op_code, address):
    """
    Decodes the instruction word fetched at the given address.

    :param op_code: the 16-bit instruction word
    :param address: the program counter value the word was fetched from
    :return: the decoded Instruction
    :raises InvalidInstructionException: if the word is not recognized
    """
    mnemonic = classify_instruction(op_code)
    if mnemonic is None:
        raise InvalidInstructionException(op_code, address)
    return Instruction(
        mnemonic=mnemonic,
        op_code=op_code,
        address=address,
        x=(op_code & X_MASK) >> 8,
        y=(op_code & Y_MASK) >> 4,
        n=op_code & N_MASK,
        nn=op_code & NN_MASK,
        nnn=op_code & NNN_MASK,
    )


def disassemble(instruction):
    """
    Renders a decoded instruction as a line of assembly, for example
    ``0200  6005  LOAD V0, 05``.

    :param instruction: the decoded Instruction
    :return: the formatted string
    """
    text = DISASSEMBLY_FORMATS[instruction.mnemonic].format(**instruction._asdict())
    return '{:04X}  {:04X}  {}'.format(instruction.address, instruction.op_code, text)
