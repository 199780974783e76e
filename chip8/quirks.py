from collections import namedtuple

# Historical interpreters disagree on a handful of instructions. Each quirk
# selects one of the documented behaviours:
#
#   shift_use_vy          - 8XY6 / 8XYE copy VY into VX before shifting
#   jump_weird            - BNNN adds VX (X = high nibble of NNN) instead of V0
#   add_to_index_overflow - FX1E sets VF when the index goes past 0xFFF
#   mem_change_index      - FX55 / FX65 leave the index at I + X + 1
Quirks = namedtuple(
    'Quirks',
    ['shift_use_vy', 'jump_weird', 'add_to_index_overflow', 'mem_change_index'])

DEFAULT_QUIRKS = Quirks(
    shift_use_vy=True,
    jump_weird=False,
    add_to_index_overflow=False,
    mem_change_index=False,
)


def add_quirk_arguments(parser):
    """
    Adds one command-line switch per quirk to the argument parser.

    :param parser: the argparse.ArgumentParser to extend
    """
    group = parser.add_argument_group('quirks')
    group.add_argument(
        "--shift-use-vy", help="8XY6/8XYE shift VY into VX (default)",
        action="store_true", dest="shift_use_vy",
        default=DEFAULT_QUIRKS.shift_use_vy)
    group.add_argument(
        "--no-shift-use-vy", help="8XY6/8XYE shift VX in place",
        action="store_false", dest="shift_use_vy")
    group.add_argument(
        "--jump-weird", help="BNNN jumps to NNN + VX instead of NNN + V0",
        action="store_true", default=DEFAULT_QUIRKS.jump_weird)
    group.add_argument(
        "--add-to-index-overflow", help="FX1E sets VF on index overflow",
        action="store_true", default=DEFAULT_QUIRKS.add_to_index_overflow)
    group.add_argument(
        "--mem-change-index", help="FX55/FX65 advance the index register",
        action="store_true", default=DEFAULT_QUIRKS.mem_change_index)


def quirks_from_args(args):
    """
    Builds the quirk configuration from parsed command-line arguments.

    :param args: the parsed command-line arguments
    :return: a Quirks tuple
    """
    return Quirks(
        shift_use_vy=args.shift_use_vy,
        jump_weird=args.jump_weird,
        add_to_index_overflow=args.add_to_index_overflow,
        mem_change_index=args.mem_change_index,
    )
