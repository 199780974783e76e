from array import array

import pygame
import pytest

from chip8 import sound
from chip8.sound import Beeper, square_wave


class FakeSound(object):
    def __init__(self, buffer):
        self.buffer = buffer
        self.calls = []

    def play(self, loops=0):
        self.calls.append(('play', loops))

    def stop(self):
        self.calls.append(('stop',))


class FakeMixer(object):
    def __init__(self, reported):
        self.reported = reported
        self.init_args = None
        self.closed = False
        self.Sound = FakeSound

    def init(self, *args, **kwargs):
        self.init_args = (args, kwargs)

    def get_init(self):
        return self.reported

    def quit(self):
        self.closed = True


class TestSquareWave:
    def test_mono_period(self):
        samples = square_wave(441, 100, 44100, -16, 1)
        assert len(samples) == 100
        assert list(samples[:50]) == [100] * 50
        assert list(samples[50:]) == [-100] * 50

    def test_samples_repeat_per_channel(self):
        samples = square_wave(441, 100, 44100, -16, 2)
        assert len(samples) == 200
        assert list(samples[:4]) == [100, 100, 100, 100]
        assert list(samples[-2:]) == [-100, -100]

    def test_other_sample_sizes_are_refused(self):
        with pytest.raises(pygame.error):
            square_wave(441, 100, 44100, 8, 1)


class TestBeeper:
    def test_asks_for_exact_format(self, monkeypatch):
        fake = FakeMixer((44100, -16, 1))
        monkeypatch.setattr(sound, 'mixer', fake)
        Beeper()
        args, kwargs = fake.init_args
        assert args == (sound.SAMPLE_RATE, sound.SAMPLE_SIZE, sound.CHANNELS, sound.BUFFER_SIZE)
        assert kwargs == {'allowedchanges': 0}

    def test_buffer_follows_running_mixer(self, monkeypatch):
        monkeypatch.setattr(sound, 'mixer', FakeMixer((22050, -16, 2)))
        beeper = Beeper(tone_hz=441, volume=10)
        expected = square_wave(441, 10, 22050, -16, 2).tobytes()
        assert beeper.beeper_sound.buffer == expected
        assert len(expected) == array('h').itemsize * 50 * 2

    def test_tone_only_changes_on_transitions(self, monkeypatch):
        fake = FakeMixer((44100, -16, 1))
        monkeypatch.setattr(sound, 'mixer', fake)
        beeper = Beeper()
        for on in (False, True, True, False, False):
            beeper.set_tone(on)
        assert beeper.beeper_sound.calls == [('play', -1), ('stop',)]
        beeper.close()
        assert fake.closed
