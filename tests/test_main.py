import pygame

from chip8.display import Display
from chip8.emulator import DEFAULT_INSTRUCTIONS_PER_SECOND
from chip8.keypad import Keypad
from chip8.main import KEY_MAPPINGS, build_parser, handle_events, main
from chip8.quirks import DEFAULT_QUIRKS, Quirks, quirks_from_args


class FakeEvent(object):
    def __init__(self, event_type, key=None):
        self.type = event_type
        self.key = key


class FakeEmulator(object):
    def __init__(self):
        self.stopped = False

    def stop(self):
        self.stopped = True


def feed_events(monkeypatch, *events):
    monkeypatch.setattr(pygame.event, 'get', lambda: list(events))


class TestCommandLine:
    def test_defaults(self):
        args = build_parser().parse_args(["game.ch8"])
        assert args.rom == "game.ch8"
        assert args.scale == 10
        assert args.ips == DEFAULT_INSTRUCTIONS_PER_SECOND
        assert args.fps == 60
        assert args.debug is False
        assert quirks_from_args(args) == DEFAULT_QUIRKS

    def test_quirk_switches(self):
        args = build_parser().parse_args([
            "game.ch8", "--no-shift-use-vy", "--jump-weird",
            "--add-to-index-overflow", "--mem-change-index"])
        assert quirks_from_args(args) == Quirks(
            shift_use_vy=False, jump_weird=True,
            add_to_index_overflow=True, mem_change_index=True)

    def test_rates(self):
        args = build_parser().parse_args(["game.ch8", "-s", "4", "-i", "900", "-f", "30"])
        assert (args.scale, args.ips, args.fps) == (4, 900, 30)

    def test_missing_rom_exits_before_opening_window(self, tmp_path):
        assert main([str(tmp_path / "missing.ch8")]) == 1

    def test_display_failure_exits_with_error(self, tmp_path, monkeypatch):
        rom = tmp_path / "loop.ch8"
        rom.write_bytes(b'\x12\x00')

        def no_display(self):
            raise pygame.error("No available video device")

        monkeypatch.setattr(Display, 'init_display', no_display)
        assert main([str(rom)]) == 1

    def test_key_mapping_covers_keypad(self):
        assert sorted(KEY_MAPPINGS.values()) == list(range(16))


class TestEvents:
    def test_keys_reach_keypad(self, monkeypatch):
        keypad = Keypad()
        feed_events(monkeypatch,
                    FakeEvent(pygame.KEYDOWN, pygame.K_w),
                    FakeEvent(pygame.KEYDOWN, pygame.K_v),
                    FakeEvent(pygame.KEYUP, pygame.K_w))
        handle_events(FakeEmulator(), keypad)
        assert keypad.is_key_down(0xF)
        assert not keypad.is_key_down(0x5)

    def test_focus_loss_releases_keys(self, monkeypatch):
        keypad = Keypad()
        keypad.key_down(0x1)
        keypad.key_down(0xA)
        feed_events(monkeypatch, FakeEvent(pygame.WINDOWFOCUSLOST))
        handle_events(FakeEmulator(), keypad)
        assert not any(keypad.is_key_down(key) for key in range(16))
        assert keypad.get_pressed_key() is None

    def test_exit_key_and_quit_stop_emulator(self, monkeypatch):
        for event in (FakeEvent(pygame.QUIT), FakeEvent(pygame.KEYDOWN, pygame.K_ESCAPE)):
            emulator = FakeEmulator()
            feed_events(monkeypatch, event)
            handle_events(emulator, Keypad())
            assert emulator.stopped
