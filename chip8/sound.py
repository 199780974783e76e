from array import array

import pygame
from pygame import mixer

# Mixer settings: 16-bit signed mono samples
SAMPLE_RATE = 44100
SAMPLE_SIZE = -16
CHANNELS = 1
BUFFER_SIZE = 512

# The tone played while the sound timer is running
TONE_HZ = 440
TONE_VOLUME = 4096


def square_wave(tone_hz, volume, sample_rate, sample_size, channels):
    """
    Builds one period of a square wave as signed 16-bit samples, with every
    sample repeated once per channel.
    """
    if sample_size != SAMPLE_SIZE:
        raise pygame.error(
            "Unsupported mixer sample size {}".format(sample_size))
    period = sample_rate // tone_hz
    half = period // 2
    frames = [volume] * half + [-volume] * (period - half)
    return array('h', [sample for sample in frames for _ in range(channels)])


class Beeper(object):
    """
    Plays a continuous square wave while the sound timer is nonzero. The CPU
    calls set_tone() after every instruction, so it only touches the mixer
    when the state actually changes.
    """
    def __init__(self, tone_hz=TONE_HZ, volume=TONE_VOLUME):
        # allowedchanges=0 makes SDL convert to our format instead of opening
        # the device in its own. The mixer may already be running though, so
        # the wave is built for whatever format get_init() reports.
        mixer.init(SAMPLE_RATE, SAMPLE_SIZE, CHANNELS, BUFFER_SIZE, allowedchanges=0)
        self.beeper_sound = mixer.Sound(
            buffer=square_wave(tone_hz, volume, *mixer.get_init()).tobytes())
        self.beeper_playing = False

    def set_tone(self, on):
        """
        Starts or stops the tone.

        :param on: True while the sound timer is nonzero
        """
        if on == self.beeper_playing:
            return
        if on:
            self.beeper_sound.play(loops=-1)
        else:
            self.beeper_sound.stop()
        self.beeper_playing = on

    def close(self):
        self.set_tone(False)
        mixer.quit()
