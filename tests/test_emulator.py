"""
Tests for the execution and timer threads. These run in real time, so the
assertions leave plenty of slack for slow machines.
"""
import time

import pytest

from chip8.cpu import CPU, STATE_HALTED
from chip8.emulator import Emulator
from chip8.exception import EmulatorFailureException, InvalidInstructionException


class RecordingAudio(object):
    def __init__(self):
        self.signals = []

    def set_tone(self, on):
        self.signals.append(on)


class BrokenAudio(object):
    def set_tone(self, on):
        raise RuntimeError("audio device lost")


def loaded_cpu(data, **kwargs):
    cpu = CPU(**kwargs)
    cpu.cpu_load_program(data)
    return cpu


class TestEmulator:
    def test_rejects_non_positive_rate(self):
        with pytest.raises(ValueError):
            Emulator(CPU(), instructions_per_second=0)

    def test_runs_until_stopped(self):
        # 7001 / 1200: count up in V0 forever
        cpu = loaded_cpu(b'\x70\x01\x12\x00')
        emulator = Emulator(cpu, instructions_per_second=1000)
        emulator.start()
        time.sleep(0.2)
        assert emulator.is_running()
        emulator.stop()
        emulator.join(timeout=2)
        assert not emulator.is_running()
        assert not any(thread.is_alive() for thread in emulator.threads)
        assert emulator.error is None
        assert cpu.cpu_registers['v'][0] > 0

    def test_timers_count_down(self):
        cpu = loaded_cpu(b'\x12\x00')
        cpu.cpu_set_timer('delay', 200)
        emulator = Emulator(cpu, instructions_per_second=100)
        emulator.start()
        time.sleep(0.3)
        emulator.stop()
        emulator.join(timeout=2)
        assert 0 < cpu.cpu_get_timer('delay') < 200

    def test_fatal_error_stops_everything(self):
        audio = RecordingAudio()
        cpu = loaded_cpu(b'\x60\x05\x01\x23', audio=audio)
        emulator = Emulator(cpu, instructions_per_second=1000)
        emulator.start()
        with pytest.raises(InvalidInstructionException) as info:
            emulator.join(timeout=2)
        assert info.value.address == 0x202
        assert emulator.error is info.value
        assert not emulator.is_running()
        assert cpu.cpu_state == STATE_HALTED
        assert audio.signals[-1] is False

    def test_cannot_start_twice(self):
        emulator = Emulator(loaded_cpu(b'\x12\x00'))
        emulator.start()
        try:
            with pytest.raises(RuntimeError):
                emulator.start()
        finally:
            emulator.stop()
            emulator.join(timeout=2)

    def test_audio_failure_stops_everything(self):
        cpu = loaded_cpu(b'\x12\x00', audio=BrokenAudio())
        emulator = Emulator(cpu, instructions_per_second=1000)
        emulator.start()
        with pytest.raises(EmulatorFailureException) as info:
            emulator.join(timeout=2)
        assert isinstance(info.value.cause, RuntimeError)
        assert emulator.error is info.value
        assert not emulator.is_running()
        assert not any(thread.is_alive() for thread in emulator.threads)
