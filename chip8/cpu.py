import logging
import threading
from random import randint

from chip8.decoder import decode_instruction, disassemble
from chip8.exception import (
    Chip8Exception, CPUHaltedException, KeyReferenceException,
    ProgramLoadException, StackOverflowException, StackUnderflowException,
    UnknownOpCodeException)
from chip8.keypad import Keypad, NUM_KEYS
from chip8.quirks import DEFAULT_QUIRKS
from chip8.screen import Screen

logger = logging.getLogger(__name__)

# The total amount of memory to allocate for the emulator
MAX_MEMORY = 4096

# Instructions address 12 bits of memory
ADDRESS_MASK = 0x0FFF

# The index register and program counter are 16 bits wide
WORD_MASK = 0xFFFF

# Where the built-in font glyphs are stored, and the size of each glyph
FONT_START = 0x50
FONT_SPRITE_SIZE = 5

# Glyphs for the hexadecimal digits 0 - F, 5 bytes each
FONT = [
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
]

# Where programs are loaded and the program counter starts
PROGRAM_COUNTER_START = 0x200

# The stack holds 16 return addresses. The stack pointer starts at the top
# entry and moves down on every push.
STACK_SIZE = 16
STACK_POINTER_START = STACK_SIZE - 1

# The total number of registers in the Chip 8 CPU
NUM_REGISTERS = 0x10

# The various states of execution
STATE_RUNNING = 'running'
STATE_AWAITING_KEY = 'awaiting_key'
STATE_HALTED = 'halted'

# C L A S S E S ###############################################################


def random_byte():
    return randint(0, 255)


class CPU(object):
    """
    A class to emulate a Chip 8 CPU. There are several good resources out on
    the web that describe the internals of the Chip 8 CPU. For example:

        http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
        http://michael.toren.net/mirrors/chip8/chip8def.htm

    To summarize these sources, the Chip 8 has:

        * 16 x 8-bit general purpose registers (V0 - VF**)
        * 1 x 16-bit index register (I)
        * 1 x 16-bit stack pointer (SP)
        * 1 x 16-bit program counter (PC)
        * 1 x 8-bit delay timer (DT)
        * 1 x 8-bit sound timer (ST)

    ** VF is a special register - it is used to store the overflow bit

    The timers are the only state shared with another thread (the 60Hz timer
    loop), so every access to them goes through cpu_timer_lock.
    """
    def __init__(self, screen=None, keypad=None, audio=None,
                 quirks=DEFAULT_QUIRKS, random_source=random_byte):
        """
        Initialize the Chip8 CPU. All collaborators are optional: a fresh
        Screen and Keypad are created when none are given, and without an
        audio sink the sound signal is simply dropped.

        :param screen: the Screen holding the pixel buffer
        :param keypad: the Keypad to read key states from
        :param audio: an object with a set_tone(on) method
        :param quirks: the Quirks selecting legacy instruction behaviour
        :param random_source: a callable returning a random byte
        """
        # There are two timer registers, one for sound and one that is general
        # purpose known as the delay timer. The timers are loaded with a value
        # and then decremented 60 times per second.
        self.cpu_timers = {
            'delay': 0,
            'sound': 0,
        }
        self.cpu_timer_lock = threading.Lock()

        # Defines the general purpose, index, stack pointer and program
        # counter registers.
        self.cpu_registers = {
            'v': [],
            'index': 0,
            'sp': 0,
            'pc': 0,
        }

        # The operation lookup table is keyed on the mnemonic produced by
        # the decoder (e.g. operand 8st4 decodes to ADDR and calls
        # self.cpu_add_reg_to_reg)
        self.cpu_operation_lookup = {
            'CLS': self.cpu_clear_screen,                       # 00E0 - CLS
            'RET': self.cpu_return_from_subroutine,             # 00EE - RET
            'JUMP': self.cpu_jump_to_address,                   # 1nnn - JUMP nnn
            'CALL': self.cpu_jump_to_subroutine,                # 2nnn - CALL nnn
            'SKE': self.cpu_skip_if_reg_equal_val,              # 3snn - SKE  Vs, nn
            'SKNE': self.cpu_skip_if_reg_not_equal_val,         # 4snn - SKNE Vs, nn
            'SKRE': self.cpu_skip_if_reg_equal_reg,             # 5st0 - SKE  Vs, Vt
            'LOAD': self.cpu_move_value_to_reg,                 # 6snn - LOAD Vs, nn
            'ADD': self.cpu_add_value_to_reg,                   # 7snn - ADD  Vs, nn
            'MOVE': self.cpu_move_reg_into_reg,                 # 8st0 - LOAD Vs, Vt
            'OR': self.cpu_logical_or,                          # 8st1 - OR   Vs, Vt
            'AND': self.cpu_logical_and,                        # 8st2 - AND  Vs, Vt
            'XOR': self.cpu_exclusive_or,                       # 8st3 - XOR  Vs, Vt
            'ADDR': self.cpu_add_reg_to_reg,                    # 8st4 - ADD  Vs, Vt
            'SUB': self.cpu_subtract_reg_from_reg,              # 8st5 - SUB  Vs, Vt
            'SHR': self.cpu_right_shift_reg,                    # 8st6 - SHR  Vs
            'SUBN': self.cpu_subtract_reg_from_reg_reversed,    # 8st7 - SUBN Vs, Vt
            'SHL': self.cpu_left_shift_reg,                     # 8stE - SHL  Vs
            'SKRNE': self.cpu_skip_if_reg_not_equal_reg,        # 9st0 - SKNE Vs, Vt
            'LOADI': self.cpu_load_index_reg_with_value,        # Annn - LOAD I, nnn
            'JUMPI': self.cpu_jump_to_reg_plus_value,           # Bnnn - JUMP V0 + nnn
            'RAND': self.cpu_generate_random_number,            # Ctnn - RAND Vt, nn
            'DRAW': self.cpu_draw_sprite,                       # Dstn - DRAW Vs, Vt, n
            'SKPR': self.cpu_skip_if_key_pressed,               # Es9E - SKPR Vs
            'SKUP': self.cpu_skip_if_key_not_pressed,           # EsA1 - SKUP Vs
            'MOVD': self.cpu_move_delay_timer_into_reg,         # Ft07 - LOAD Vt, DELAY
            'KEYD': self.cpu_wait_for_keypress,                 # Ft0A - KEYD Vt
            'SETD': self.cpu_move_reg_into_delay_timer,         # Fs15 - LOAD DELAY, Vs
            'SETS': self.cpu_move_reg_into_sound_timer,         # Fs18 - LOAD SOUND, Vs
            'ADDI': self.cpu_add_reg_into_index,                # Fs1E - ADD  I, Vs
            'FONT': self.cpu_load_index_with_reg_sprite,        # Fs29 - LOAD I, Vs
            'BCD': self.cpu_store_bcd_in_memory,                # Fs33 - BCD
            'STOR': self.cpu_store_regs_in_memory,              # Fs55 - STOR [I], Vs
            'READ': self.cpu_read_regs_from_memory,             # Fs65 - LOAD Vs, [I]
        }
        self.cpu_operand = 0
        self.cpu_state = STATE_RUNNING
        self.cpu_quirks = quirks
        self.cpu_screen = screen if screen is not None else Screen()
        self.cpu_keypad = keypad if keypad is not None else Keypad()
        self.cpu_audio = audio
        self.cpu_random = random_source
        self.cpu_memory = bytearray(MAX_MEMORY)
        self.cpu_stack = []
        self.cpu_reset()

    def __str__(self):
        val = 'PC: {:4X}  OP: {:4X}  SP: {:2d}  {}\n'.format(
            self.cpu_registers['pc'], self.cpu_operand,
            self.cpu_registers['sp'], self.cpu_state)
        for index in range(NUM_REGISTERS):
            val += 'V{:X}: {:2X}\n'.format(index, self.cpu_registers['v'][index])
        val += 'I: {:4X}\n'.format(self.cpu_registers['index'])
        val += 'DT: {:2X}  ST: {:2X}\n'.format(
            self.cpu_get_timer('delay'), self.cpu_get_timer('sound'))
        return val

    def cpu_fetch(self):
        """
        Reads the big-endian instruction word at the program counter.

        :return: the 16-bit instruction word
        """
        cpu_pc = self.cpu_registers['pc'] & ADDRESS_MASK
        cpu_operand = self.cpu_memory[cpu_pc] << 8
        cpu_operand |= self.cpu_memory[(cpu_pc + 1) & ADDRESS_MASK]
        return cpu_operand

    def cpu_execute_instruction(self, cpu_operator_param=None):
        """
        Execute the next instruction pointed to by the program counter.
        The word is validated and decoded, the program counter is increased
        by 2, and then the instruction is executed. For testing purposes,
        pass the operand directly to the function; in that case the
        program counter is not advanced.

        After every instruction the state of the sound timer is sent to the
        audio sink.

        Any error raised while executing halts the CPU, and the error is
        passed on to the caller.

        :param cpu_operator_param: the operand to execute
        :return: the decoded Instruction that was executed
        """
        if self.cpu_state == STATE_HALTED:
            raise CPUHaltedException()

        try:
            if cpu_operator_param is not None:
                cpu_instruction = decode_instruction(
                    cpu_operator_param, self.cpu_registers['pc'])
            else:
                cpu_instruction = decode_instruction(
                    self.cpu_fetch(), self.cpu_registers['pc'])
                self.cpu_registers['pc'] = (self.cpu_registers['pc'] + 2) & WORD_MASK
            self.cpu_operand = cpu_instruction.op_code

            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(disassemble(cpu_instruction))

            cpu_operation = self.cpu_operation_lookup.get(cpu_instruction.mnemonic)
            if cpu_operation is None:
                raise UnknownOpCodeException(cpu_instruction.op_code)
            cpu_operation(cpu_instruction)
        except Chip8Exception as error:
            self.cpu_state = STATE_HALTED
            logger.error("CPU halted: %s", error)
            raise

        self.cpu_update_sound()
        return cpu_instruction

    def cpu_clear_screen(self, cpu_instruction):
        """
        00E0 - CLS

        Turns off every pixel on the screen.
        """
        self.cpu_screen.clear_screen()

    def cpu_return_from_subroutine(self, cpu_instruction):
        """
        00EE - RET

        Return from subroutine. Pop the return address off the stack and load
        it into the program counter.
        """
        if self.cpu_registers['sp'] >= STACK_POINTER_START:
            raise StackUnderflowException(cpu_instruction.address)
        self.cpu_registers['sp'] += 1
        self.cpu_registers['pc'] = self.cpu_stack[self.cpu_registers['sp']]

    def cpu_jump_to_address(self, cpu_instruction):
        """
        1nnn - JUMP nnn

        Jump to address. The address to jump to is calculated using the bits
        taken from the operand as follows:

           Bits:  15-12    11-8      7-4      3-0
                  unused  address  address  address
        """
        self.cpu_registers['pc'] = cpu_instruction.nnn

    def cpu_jump_to_subroutine(self, cpu_instruction):
        """
        2nnn - CALL nnn

        Jump to subroutine. Save the current program counter on the stack. The
        subroutine to jump to is taken from the operand as follows:

           Bits:  15-12    11-8      7-4      3-0
                  unused  address  address  address

        The stack holds 16 entries; a 17th nested call is an error.
        """
        if self.cpu_registers['sp'] < 0:
            raise StackOverflowException(cpu_instruction.nnn)
        self.cpu_stack[self.cpu_registers['sp']] = self.cpu_registers['pc']
        self.cpu_registers['sp'] -= 1
        self.cpu_registers['pc'] = cpu_instruction.nnn

    def cpu_skip_if_reg_equal_val(self, cpu_instruction):
        """
        3snn - SKE Vs, nn

        Skip if register contents equal to constant value. The calculation for
        the register and constant is performed on the operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   source  constant  constant

        The program counter is updated to skip the next instruction by
        advancing it by 2 bytes.
        """
        if self.cpu_registers['v'][cpu_instruction.x] == cpu_instruction.nn:
            self.cpu_registers['pc'] += 2

    def cpu_skip_if_reg_not_equal_val(self, cpu_instruction):
        """
        4snn - SKNE Vs, nn

        Skip if register contents not equal to constant value.
        """
        if self.cpu_registers['v'][cpu_instruction.x] != cpu_instruction.nn:
            self.cpu_registers['pc'] += 2

    def cpu_skip_if_reg_equal_reg(self, cpu_instruction):
        """
        5st0 - SKE Vs, Vt

        Skip if source register is equal to target register. The calculation
        for the registers to use is performed on the operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   source    target      0
        """
        cpu_v = self.cpu_registers['v']
        if cpu_v[cpu_instruction.x] == cpu_v[cpu_instruction.y]:
            self.cpu_registers['pc'] += 2

    def cpu_skip_if_reg_not_equal_reg(self, cpu_instruction):
        """
        9st0 - SKNE Vs, Vt

        Skip if source register is not equal to target register.
        """
        cpu_v = self.cpu_registers['v']
        if cpu_v[cpu_instruction.x] != cpu_v[cpu_instruction.y]:
            self.cpu_registers['pc'] += 2

    def cpu_move_value_to_reg(self, cpu_instruction):
        """
        6snn - LOAD Vs, nn

        Move the constant value into the specified register. The calculation
        for the registers is performed on the operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    value     value
        """
        self.cpu_registers['v'][cpu_instruction.x] = cpu_instruction.nn

    def cpu_add_value_to_reg(self, cpu_instruction):
        """
        7snn - ADD Vs, nn

        Add the constant value to the specified register. The result wraps
        around at 256 and the carry flag is left untouched.
        """
        cpu_target = cpu_instruction.x
        temp = self.cpu_registers['v'][cpu_target] + cpu_instruction.nn
        self.cpu_registers['v'][cpu_target] = temp if temp < 256 else temp - 256

    def cpu_move_reg_into_reg(self, cpu_instruction):
        """
        8st0 - LOAD Vs, Vt

        Move the value of the source register into the value of the target
        register. The calculation for the registers is performed on the
        operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    source      0
        """
        cpu_v = self.cpu_registers['v']
        cpu_v[cpu_instruction.x] = cpu_v[cpu_instruction.y]

    def cpu_logical_or(self, cpu_instruction):
        """
        8ts1 - OR   Vs, Vt

        Perform a logical OR operation between the source and the target
        register, and store the result in the target register.
        """
        cpu_v = self.cpu_registers['v']
        cpu_v[cpu_instruction.x] |= cpu_v[cpu_instruction.y]

    def cpu_logical_and(self, cpu_instruction):
        """
        8ts2 - AND  Vs, Vt

        Perform a logical AND operation between the source and the target
        register, and store the result in the target register.
        """
        cpu_v = self.cpu_registers['v']
        cpu_v[cpu_instruction.x] &= cpu_v[cpu_instruction.y]

    def cpu_exclusive_or(self, cpu_instruction):
        """
        8ts3 - XOR  Vs, Vt

        Perform a logical XOR operation between the source and the target
        register, and store the result in the target register.
        """
        cpu_v = self.cpu_registers['v']
        cpu_v[cpu_instruction.x] ^= cpu_v[cpu_instruction.y]

    def cpu_add_reg_to_reg(self, cpu_instruction):
        """
        8ts4 - ADD  Vt, Vs

        Add the value in the source register to the value in the target
        register, and store the result in the target register. The register
        calculations are as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    source      4

        If a carry is generated, set a carry flag in register VF. The flag is
        written first and the source is then added to the target register,
        so with VF as the target the result is the flag plus the source.
        """
        cpu_v = self.cpu_registers['v']
        cpu_source_reg = cpu_v[cpu_instruction.y]
        cpu_v[0xF] = 1 if cpu_v[cpu_instruction.x] + cpu_source_reg > 255 else 0
        cpu_v[cpu_instruction.x] = (cpu_v[cpu_instruction.x] + cpu_source_reg) & 0xFF

    def cpu_subtract_reg_from_reg(self, cpu_instruction):
        """
        8ts5 - SUB  Vt, Vs

        Subtract the value in the source register from the value in the target
        register, and store the result in the target register. If the target
        is strictly greater than the source, set the carry flag in VF.
        """
        cpu_v = self.cpu_registers['v']
        cpu_target_reg = cpu_v[cpu_instruction.x]
        cpu_source_reg = cpu_v[cpu_instruction.y]
        cpu_v[0xF] = 1 if cpu_target_reg > cpu_source_reg else 0
        cpu_v[cpu_instruction.x] = (cpu_target_reg - cpu_source_reg) & 0xFF

    def cpu_subtract_reg_from_reg_reversed(self, cpu_instruction):
        """
        8ts7 - SUBN Vt, Vs

        Subtract the value in the target register from the value in the source
        register, and store the result in the target register. If the source
        is strictly greater than the target, set the carry flag in VF.
        """
        cpu_v = self.cpu_registers['v']
        cpu_target_reg = cpu_v[cpu_instruction.x]
        cpu_source_reg = cpu_v[cpu_instruction.y]
        cpu_v[0xF] = 1 if cpu_source_reg > cpu_target_reg else 0
        cpu_v[cpu_instruction.x] = (cpu_source_reg - cpu_target_reg) & 0xFF

    def _cpu_load_shift_operand(self, cpu_instruction):
        if self.cpu_quirks.shift_use_vy:
            self.cpu_registers['v'][cpu_instruction.x] = \
                self.cpu_registers['v'][cpu_instruction.y]

    def cpu_right_shift_reg(self, cpu_instruction):
        """
        8st6 - SHR  Vs

        Shift the bits in the specified register 1 bit to the right. Bit
        0 will be shifted into register vf. With the shift_use_vy quirk the
        value of Vt is copied into Vs before the shift. The shift reads Vs
        after the flag is written, so SHR VF shifts the flag itself.

           Bits:  15-12     11-8      7-4       3-0
                  unused   source   target      6
        """
        cpu_v = self.cpu_registers['v']
        self._cpu_load_shift_operand(cpu_instruction)
        cpu_v[0xF] = cpu_v[cpu_instruction.x] & 0x1
        cpu_v[cpu_instruction.x] = cpu_v[cpu_instruction.x] >> 1

    def cpu_left_shift_reg(self, cpu_instruction):
        """
        8stE - SHL  Vs

        Shift the bits in the specified register 1 bit to the left. Bit
        7 will be shifted into register vf. With the shift_use_vy quirk the
        value of Vt is copied into Vs before the shift. As with SHR, the
        shift reads Vs after the flag is written.

           Bits:  15-12     11-8      7-4       3-0
                  unused   source   target      E
        """
        cpu_v = self.cpu_registers['v']
        self._cpu_load_shift_operand(cpu_instruction)
        cpu_v[0xF] = (cpu_v[cpu_instruction.x] & 0x80) >> 7
        cpu_v[cpu_instruction.x] = (cpu_v[cpu_instruction.x] << 1) & 0xFF

    def cpu_load_index_reg_with_value(self, cpu_instruction):
        """
        Annn - LOAD I, nnn

        Load index register with constant value.
        """
        self.cpu_registers['index'] = cpu_instruction.nnn

    def cpu_jump_to_reg_plus_value(self, cpu_instruction):
        """
        Bnnn - JUMP V0 + nnn

        Load the program counter with nnn plus the value of V0. With the
        jump_weird quirk the register is chosen by the highest nibble of nnn
        instead (Bxnn jumps to xnn + Vx).
        """
        if self.cpu_quirks.jump_weird:
            cpu_offset = self.cpu_registers['v'][(cpu_instruction.nnn >> 8) & 0xF]
        else:
            cpu_offset = self.cpu_registers['v'][0]
        self.cpu_registers['pc'] = (cpu_instruction.nnn + cpu_offset) & ADDRESS_MASK

    def cpu_generate_random_number(self, cpu_instruction):
        """
        Ctnn - RAND Vt, nn

        A random number between 0 and 255 is generated. The contents of it are
        then ANDed with the constant value passed in the operand. The result is
        stored in the target register.
        """
        self.cpu_registers['v'][cpu_instruction.x] = \
            self.cpu_random() & cpu_instruction.nn

    def cpu_draw_sprite(self, cpu_instruction):
        """
        Dxyn - DRAW x, y, num_bytes

        Draws the sprite pointed to in the index register at the specified
        x and y coordinates. Drawing is done via an XOR routine, meaning that
        if the target pixel is already turned on, and a pixel is set to be
        turned on at that same location via the draw, then the pixel is turned
        off. The starting coordinates wrap around the screen, but the pixels
        of the sprite itself are clipped at the right and bottom edges. Each
        sprite is 8 bits (1 byte) wide. The num_bytes parameter sets how tall
        the sprite is. For example, assume that the index register pointed
        to the following 7 bytes:

                       bit 0 1 2 3 4 5 6 7

           byte 0          0 1 1 1 1 1 0 0
           byte 1          0 1 0 0 0 0 0 0
           byte 2          0 1 0 0 0 0 0 0
           byte 3          0 1 1 1 1 1 0 0
           byte 4          0 1 0 0 0 0 0 0
           byte 5          0 1 0 0 0 0 0 0
           byte 6          0 1 1 1 1 1 0 0

        This would draw a character on the screen that looks like an 'E'. If
        any pixel is turned off by the draw, VF is set to 1, otherwise 0.

           Bits:  15-12     11-8      7-4       3-0
                  unused    x_source  y_source  num_bytes
        """
        cpu_x_pos = self.cpu_registers['v'][cpu_instruction.x] % self.cpu_screen.screen_width
        cpu_y_pos = self.cpu_registers['v'][cpu_instruction.y] % self.cpu_screen.screen_height
        cpu_index = self.cpu_registers['index']
        cpu_sprite = [
            self.cpu_memory[(cpu_index + cpu_y_index) & ADDRESS_MASK]
            for cpu_y_index in range(cpu_instruction.n)
        ]
        cpu_collision = self.cpu_screen.draw_sprite(cpu_x_pos, cpu_y_pos, cpu_sprite)
        self.cpu_registers['v'][0xF] = 1 if cpu_collision else 0

    def _cpu_key_value(self, cpu_source):
        cpu_key = self.cpu_registers['v'][cpu_source]
        if cpu_key >= NUM_KEYS:
            raise KeyReferenceException(cpu_key)
        return cpu_key

    def cpu_skip_if_key_pressed(self, cpu_instruction):
        """
        Es9E - SKPR Vs

        Check to see if the key specified in the source register is pressed,
        and if it is, skip the next instruction.

           Bits:  15-12    11-8      7-4      3-0
                  unused   source     9        E
        """
        if self.cpu_keypad.is_key_down(self._cpu_key_value(cpu_instruction.x)):
            self.cpu_registers['pc'] += 2

    def cpu_skip_if_key_not_pressed(self, cpu_instruction):
        """
        EsA1 - SKUP Vs

        Check to see if the key specified in the source register is pressed,
        and if it is NOT, skip the next instruction.
        """
        if not self.cpu_keypad.is_key_down(self._cpu_key_value(cpu_instruction.x)):
            self.cpu_registers['pc'] += 2

    def cpu_move_delay_timer_into_reg(self, cpu_instruction):
        """
        Ft07 - LOAD Vt, DELAY

        Move the value of the delay timer into the target register.
        """
        self.cpu_registers['v'][cpu_instruction.x] = self.cpu_get_timer('delay')

    def cpu_wait_for_keypress(self, cpu_instruction):
        """
        Ft0A - KEYD Vt

        Wait until a key is pressed and move the value of the key into the
        specified register. Execution is not suspended: if no key is held,
        the program counter is moved back onto this instruction and the CPU
        enters the awaiting_key state, so the same instruction is polled again
        on the next cycle.

           Bits:  15-12     11-8      7-4       3-0
                  unused    target     0         A
        """
        cpu_key = self.cpu_keypad.get_pressed_key()
        if cpu_key is None:
            self.cpu_state = STATE_AWAITING_KEY
            self.cpu_registers['pc'] -= 2
            return

        self.cpu_registers['v'][cpu_instruction.x] = cpu_key
        self.cpu_state = STATE_RUNNING

    def cpu_move_reg_into_delay_timer(self, cpu_instruction):
        """
        Fs15 - LOAD DELAY, Vs

        Move the value stored in the specified source register into the delay
        timer.
        """
        self.cpu_set_timer('delay', self.cpu_registers['v'][cpu_instruction.x])

    def cpu_move_reg_into_sound_timer(self, cpu_instruction):
        """
        Fs18 - LOAD SOUND, Vs

        Move the value stored in the specified source register into the sound
        timer.
        """
        self.cpu_set_timer('sound', self.cpu_registers['v'][cpu_instruction.x])

    def cpu_add_reg_into_index(self, cpu_instruction):
        """
        Fs1E - ADD  I, Vs

        Add the value of the register into the index register value. With the
        add_to_index_overflow quirk, VF is set when the index goes past the
        addressable range (0xFFF) and cleared otherwise.
        """
        cpu_index = (self.cpu_registers['index'] +
                     self.cpu_registers['v'][cpu_instruction.x]) & WORD_MASK
        self.cpu_registers['index'] = cpu_index
        if self.cpu_quirks.add_to_index_overflow:
            self.cpu_registers['v'][0xF] = 1 if cpu_index > ADDRESS_MASK else 0

    def cpu_load_index_with_reg_sprite(self, cpu_instruction):
        """
        Fs29 - LOAD I, Vs

        Load the index with the font glyph for the digit in the source
        register. All glyphs are 5 bytes long, so the location of the
        specified glyph is the font base plus the digit multiplied by 5.
        """
        cpu_digit = self._cpu_key_value(cpu_instruction.x)
        self.cpu_registers['index'] = FONT_START + cpu_digit * FONT_SPRITE_SIZE

    def cpu_store_bcd_in_memory(self, cpu_instruction):
        """
        Fs33 - BCD

        Take the value stored in source and place the digits in the following
        locations:

            hundreds   -> self.memory[index]
            tens       -> self.memory[index + 1]
            ones       -> self.memory[index + 2]

        For example, if the value is 123, then the following values will be
        placed at the specified locations:

             1 -> self.memory[index]
             2 -> self.memory[index + 1]
             3 -> self.memory[index + 2]
        """
        cpu_value = self.cpu_registers['v'][cpu_instruction.x]
        cpu_index = self.cpu_registers['index']
        self.cpu_memory[cpu_index & ADDRESS_MASK] = cpu_value // 100
        self.cpu_memory[(cpu_index + 1) & ADDRESS_MASK] = (cpu_value // 10) % 10
        self.cpu_memory[(cpu_index + 2) & ADDRESS_MASK] = cpu_value % 10

    def _cpu_advance_index(self, cpu_instruction):
        if self.cpu_quirks.mem_change_index:
            self.cpu_registers['index'] = \
                (self.cpu_registers['index'] + cpu_instruction.x + 1) & WORD_MASK

    def cpu_store_regs_in_memory(self, cpu_instruction):
        """
        Fs55 - STOR [I], Vs

        Store the V registers V0 through Vs in the memory pointed to by the
        index register. For example, to store all of the V registers, the
        source register would be 'F'.
        """
        cpu_index = self.cpu_registers['index']
        for cpu_counter in range(cpu_instruction.x + 1):
            self.cpu_memory[(cpu_index + cpu_counter) & ADDRESS_MASK] = \
                self.cpu_registers['v'][cpu_counter]
        self._cpu_advance_index(cpu_instruction)

    def cpu_read_regs_from_memory(self, cpu_instruction):
        """
        Fs65 - LOAD Vs, [I]

        Read the V registers V0 through Vs from the memory pointed to by the
        index register.
        """
        cpu_index = self.cpu_registers['index']
        for cpu_counter in range(cpu_instruction.x + 1):
            self.cpu_registers['v'][cpu_counter] = \
                self.cpu_memory[(cpu_index + cpu_counter) & ADDRESS_MASK]
        self._cpu_advance_index(cpu_instruction)

    def cpu_reset(self):
        """
        Reset the CPU by blanking out memory, registers, timers, the stack
        and the screen. The font glyphs are loaded back into memory.
        """
        self.cpu_memory = bytearray(MAX_MEMORY)
        self.cpu_memory[FONT_START:FONT_START + len(FONT)] = bytes(FONT)
        self.cpu_registers['v'] = [0] * NUM_REGISTERS
        self.cpu_registers['pc'] = 0
        self.cpu_registers['sp'] = STACK_POINTER_START
        self.cpu_registers['index'] = 0
        self.cpu_stack = [0] * STACK_SIZE
        self.cpu_set_timer('delay', 0)
        self.cpu_set_timer('sound', 0)
        self.cpu_screen.clear_screen()
        self.cpu_operand = 0
        self.cpu_state = STATE_RUNNING

    def cpu_load_program(self, cpu_program, filename='<memory>'):
        """
        Copy the program bytes into memory at the program start address and
        point the program counter at them.

        :param cpu_program: the program as a bytes-like object
        :param filename: where the program came from, for error messages
        """
        if len(cpu_program) == 0:
            raise ProgramLoadException(filename, "program is empty")
        if len(cpu_program) > MAX_MEMORY - PROGRAM_COUNTER_START:
            raise ProgramLoadException(
                filename, "program is {} bytes, at most {} fit in memory".format(
                    len(cpu_program), MAX_MEMORY - PROGRAM_COUNTER_START))

        cpu_end = PROGRAM_COUNTER_START + len(cpu_program)
        self.cpu_memory[PROGRAM_COUNTER_START:cpu_end] = cpu_program
        self.cpu_registers['pc'] = PROGRAM_COUNTER_START
        logger.info("Loaded %d bytes from %s", len(cpu_program), filename)

    def cpu_load_rom(self, filename):
        """
        Load the ROM indicated by the filename into memory.

        :param filename: the name of the file to load
        """
        try:
            with open(filename, 'rb') as rom_file:
                cpu_romdata = rom_file.read()
        except (IOError, OSError) as error:
            raise ProgramLoadException(filename, error.strerror or str(error)) from error
        self.cpu_load_program(cpu_romdata, filename)

    def cpu_get_timer(self, name):
        """
        Returns the value of the 'delay' or 'sound' timer.
        """
        with self.cpu_timer_lock:
            return self.cpu_timers[name]

    def cpu_set_timer(self, name, value):
        """
        Sets the 'delay' or 'sound' timer.
        """
        with self.cpu_timer_lock:
            self.cpu_timers[name] = value & 0xFF

    def cpu_decrement_timers(self):
        """
        Decrement both the sound and delay timer, stopping at 0.
        """
        with self.cpu_timer_lock:
            if self.cpu_timers['delay'] != 0:
                self.cpu_timers['delay'] -= 1

            if self.cpu_timers['sound'] != 0:
                self.cpu_timers['sound'] -= 1

    def cpu_is_sound_on(self):
        return self.cpu_get_timer('sound') != 0

    def cpu_update_sound(self):
        """
        Tells the audio sink whether the tone should be playing.
        """
        if self.cpu_audio is not None:
            self.cpu_audio.set_tone(self.cpu_is_sound_on())
