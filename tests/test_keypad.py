import pytest

from chip8.exception import KeyReferenceException
from chip8.keypad import Keypad


class TestKeypad:
    def test_nothing_held(self):
        keypad = Keypad()
        assert keypad.get_pressed_key() is None
        assert not any(keypad.is_key_down(key) for key in range(16))

    def test_key_down_and_up(self):
        keypad = Keypad()
        keypad.key_down(0xA)
        assert keypad.is_key_down(0xA)
        keypad.key_up(0xA)
        assert not keypad.is_key_down(0xA)
        assert keypad.get_pressed_key() is None

    def test_most_recent_held_key(self):
        keypad = Keypad()
        keypad.key_down(1)
        keypad.key_down(2)
        assert keypad.get_pressed_key() == 2
        keypad.key_up(2)
        assert keypad.get_pressed_key() == 1
        keypad.key_down(1)
        keypad.key_down(3)
        keypad.key_down(1)
        assert keypad.get_pressed_key() == 1

    def test_release_all(self):
        keypad = Keypad()
        keypad.key_down(4)
        keypad.key_down(5)
        keypad.release_all()
        assert keypad.get_pressed_key() is None

    def test_releasing_unheld_key_is_ignored(self):
        keypad = Keypad()
        keypad.key_up(7)
        assert keypad.get_pressed_key() is None

    @pytest.mark.parametrize("key", [-1, 0x10, 0xFF])
    def test_out_of_range(self, key):
        keypad = Keypad()
        with pytest.raises(KeyReferenceException):
            keypad.key_down(key)
        with pytest.raises(KeyReferenceException):
            keypad.is_key_down(key)
