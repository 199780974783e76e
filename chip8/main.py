import argparse
import logging
import sys

import pygame

from chip8.cpu import CPU
from chip8.display import Display
from chip8.emulator import Emulator, DEFAULT_INSTRUCTIONS_PER_SECOND
from chip8.exception import Chip8Exception
from chip8.keypad import Keypad
from chip8.quirks import add_quirk_arguments, quirks_from_args
from chip8.screen import Screen
from chip8.sound import Beeper

logger = logging.getLogger(__name__)

# Frames drawn per second by the presentation loop
DEFAULT_FPS = 60

# Sets which keys on the keyboard map to the Chip 8 keys. The keypad
#
#   1 2 3 C
#   4 5 6 D
#   7 8 9 E
#   A 0 B F
#
# is laid out on the left hand side of a QWERTY keyboard.
KEY_MAPPINGS = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}

# Closes the emulator
EXIT_KEY = pygame.K_ESCAPE


def build_parser():
    parser = argparse.ArgumentParser(
        description="Starts a simple Chip 8 emulator")
    parser.add_argument(
        "rom", help="the ROM file to load on startup")
    parser.add_argument(
        "-s", help="the scale factor to apply to the display "
                   "(default is 10)", type=int, default=10, dest="scale")
    parser.add_argument(
        "-i", help="the number of instructions to execute per second "
                   "(default is {})".format(DEFAULT_INSTRUCTIONS_PER_SECOND),
        type=int, default=DEFAULT_INSTRUCTIONS_PER_SECOND, dest="ips")
    parser.add_argument(
        "-f", help="the number of frames to draw per second "
                   "(default is {})".format(DEFAULT_FPS),
        type=int, default=DEFAULT_FPS, dest="fps")
    parser.add_argument(
        "--debug", help="show the frame rate and delay timer, and trace "
                        "every instruction", action="store_true")
    add_quirk_arguments(parser)
    return parser


def open_beeper():
    try:
        return Beeper()
    except pygame.error as error:
        logger.warning("Sound disabled: %s", error)
        return None


def handle_events(emulator, keypad):
    """
    Passes keyboard events on to the keypad, and stops the emulator when
    the window is closed or the exit key is pressed. Losing focus releases
    every key, since the key up events go to another window.
    """
    for event in pygame.event.get():
        if event.type == pygame.QUIT:
            emulator.stop()
        elif event.type == pygame.KEYDOWN:
            if event.key == EXIT_KEY:
                emulator.stop()
            elif event.key in KEY_MAPPINGS:
                keypad.key_down(KEY_MAPPINGS[event.key])
        elif event.type == pygame.KEYUP:
            if event.key in KEY_MAPPINGS:
                keypad.key_up(KEY_MAPPINGS[event.key])
        elif event.type == pygame.WINDOWFOCUSLOST:
            keypad.release_all()


def screen_cpu_connector(args):
    """
    Runs the main emulator loop with the specified arguments. The CPU and
    timers run on their own threads; this thread draws frames and reads the
    keyboard until the emulator stops.

    :param args: the parsed command-line arguments
    """
    project_screen = Screen()
    project_keypad = Keypad()
    project_cpu = CPU(project_screen, project_keypad, quirks=quirks_from_args(args))
    project_cpu.cpu_load_rom(args.rom)

    project_display = Display(ratio=args.scale)
    project_display.init_display()
    project_beeper = open_beeper()
    project_cpu.cpu_audio = project_beeper

    emulator = Emulator(project_cpu, args.ips)
    clock = pygame.time.Clock()
    emulator.start()
    try:
        while emulator.is_running():
            handle_events(emulator, project_keypad)
            project_display.render(project_screen.snapshot())
            if args.debug:
                project_display.draw_debug_info(
                    clock.get_fps(), project_cpu.cpu_get_timer('delay'))
            project_display.update_screen()
            clock.tick(args.fps)
    finally:
        emulator.stop()
        try:
            emulator.join()
        finally:
            if project_beeper is not None:
                project_beeper.close()
            project_display.close()


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s")
    try:
        screen_cpu_connector(args)
    except Chip8Exception as error:
        logger.error("%s", error)
        return 1
    except pygame.error as error:
        logger.error("pygame: %s", error)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
