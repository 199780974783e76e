import threading

from chip8.exception import KeyReferenceException

# The Chip 8 has a 16 key hexadecimal keypad
NUM_KEYS = 0x10


class Keypad(object):
    """
    The logical 16 key keypad. The front end reports physical key events
    with key_down() and key_up(); the CPU asks which keys are held.
    Keys are stored in the order they were pressed so that the most
    recent key still held down can be reported to Fx0A.
    """
    def __init__(self):
        self.keypad_lock = threading.Lock()
        self.keypad_held = []

    @staticmethod
    def _check_key(key_value):
        if not 0 <= key_value < NUM_KEYS:
            raise KeyReferenceException(key_value)

    def key_down(self, key_value):
        """
        Marks the key as held down.

        :param key_value: the key, 0x0 - 0xF
        """
        self._check_key(key_value)
        with self.keypad_lock:
            if key_value in self.keypad_held:
                self.keypad_held.remove(key_value)
            self.keypad_held.append(key_value)

    def key_up(self, key_value):
        """
        Marks the key as released.

        :param key_value: the key, 0x0 - 0xF
        """
        self._check_key(key_value)
        with self.keypad_lock:
            if key_value in self.keypad_held:
                self.keypad_held.remove(key_value)

    def release_all(self):
        with self.keypad_lock:
            self.keypad_held = []

    def is_key_down(self, key_value):
        """
        Returns True if the key is currently held down.

        :param key_value: the key, 0x0 - 0xF
        """
        self._check_key(key_value)
        with self.keypad_lock:
            return key_value in self.keypad_held

    def get_pressed_key(self):
        """
        Returns the most recently pressed key that is still held down, or
        None if no key is held.
        """
        with self.keypad_lock:
            if self.keypad_held:
                return self.keypad_held[-1]
            return None
