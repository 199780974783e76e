"""
Tests for instruction classification and decoding.
"""
import pytest

from chip8.decoder import (
    MNEMONICS, classify_instruction, decode_instruction, disassemble,
    is_valid_instruction)
from chip8.exception import InvalidInstructionException

ALWAYS_VALID_OPCODES = (0x1, 0x2, 0x3, 0x4, 0x6, 0x7, 0xA, 0xB, 0xC, 0xD)
MISC_LOW_BYTES = (0x07, 0x0A, 0x15, 0x18, 0x1E, 0x29, 0x33, 0x55, 0x65)


def reference_valid(word):
    """Straightforward restatement of the accepted bit patterns."""
    opcode = word >> 12
    if opcode in ALWAYS_VALID_OPCODES:
        return True
    if opcode == 0x0:
        return word in (0x00E0, 0x00EE)
    if opcode in (0x5, 0x9):
        return word & 0xF00F in (0x5000, 0x9000)
    if opcode == 0x8:
        return word & 0xF <= 0x7 or word & 0xF == 0xE
    if opcode == 0xE:
        return word & 0xFF in (0x9E, 0xA1)
    return word & 0xFF in MISC_LOW_BYTES


class TestValidity:
    def test_every_word_matches_reference(self):
        for word in range(0x10000):
            assert is_valid_instruction(word) == reference_valid(word), hex(word)

    def test_always_valid_opcodes_ignore_operands(self):
        for opcode in ALWAYS_VALID_OPCODES:
            for low in (0x000, 0x123, 0xFFF):
                assert is_valid_instruction((opcode << 12) | low)

    def test_opcode_zero_only_cls_and_ret(self):
        assert classify_instruction(0x00E0) == 'CLS'
        assert classify_instruction(0x00EE) == 'RET'
        assert classify_instruction(0x0000) is None
        assert classify_instruction(0x0123) is None
        assert classify_instruction(0x00E1) is None

    def test_register_skips_need_zero_low_nibble(self):
        assert classify_instruction(0x5120) == 'SKRE'
        assert classify_instruction(0x9120) == 'SKRNE'
        assert classify_instruction(0x5121) is None
        assert classify_instruction(0x912F) is None

    def test_logical_sub_operations(self):
        for low in range(0x8):
            assert is_valid_instruction(0x8120 | low)
        assert classify_instruction(0x812E) == 'SHL'
        for low in (0x8, 0x9, 0xA, 0xB, 0xC, 0xD, 0xF):
            assert not is_valid_instruction(0x8120 | low)

    def test_keyboard_and_misc(self):
        assert classify_instruction(0xE39E) == 'SKPR'
        assert classify_instruction(0xE3A1) == 'SKUP'
        assert classify_instruction(0xE3A2) is None
        assert classify_instruction(0xF30A) == 'KEYD'
        assert classify_instruction(0xF330) is None
        assert classify_instruction(0xF375) is None

    def test_closed_set_of_operations(self):
        assert len(MNEMONICS) == 34


class TestDecode:
    def test_fields(self):
        instruction = decode_instruction(0xD12F, 0x204)
        assert instruction.mnemonic == 'DRAW'
        assert instruction.op_code == 0xD12F
        assert instruction.address == 0x204
        assert instruction.x == 0x1
        assert instruction.y == 0x2
        assert instruction.n == 0xF
        assert instruction.nn == 0x2F
        assert instruction.nnn == 0x12F

    def test_invalid_word_raises_with_word_and_address(self):
        with pytest.raises(InvalidInstructionException) as info:
            decode_instruction(0xF0FF, 0x3AE)
        assert info.value.op_code == 0xF0FF
        assert info.value.address == 0x3AE
        assert "0xF0FF" in str(info.value)
        assert "0x03AE" in str(info.value)


class TestDisassemble:
    @pytest.mark.parametrize("word, text", [
        (0x00E0, "CLS"),
        (0x6005, "LOAD V0, 05"),
        (0x3A12, "SKE  VA, 12"),
        (0x2ABC, "CALL ABC"),
        (0xD01F, "DRAW V0, V1, F"),
        (0xF533, "BCD  V5"),
        (0xFE65, "LOAD VE, [I]"),
    ])
    def test_text(self, word, text):
        assert disassemble(decode_instruction(word, 0x200)) == \
            "0200  {:04X}  {}".format(word, text)

    def test_every_mnemonic_has_a_format(self):
        for word in range(0x10000):
            if is_valid_instruction(word):
                disassemble(decode_instruction(word, 0))
