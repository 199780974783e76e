class Chip8Exception(Exception):
    """
    The base class for all errors raised by the Chip 8 emulator.
    """


class UnknownOpCodeException(Chip8Exception):
    """
    A class to raise unknown op code exceptions. This is raised when the
    CPU has no routine for an operation that the decoder accepted.
    """
    def __init__(self, op_code):
        self.op_code = op_code
        Chip8Exception.__init__(self, "Unknown op-code: {:X}".format(op_code))


class InvalidInstructionException(Chip8Exception):
    """
    Raised when the word fetched from memory does not match any of the
    recognized instruction bit patterns.
    """
    def __init__(self, op_code, address):
        self.op_code = op_code
        self.address = address
        Chip8Exception.__init__(
            self, "Invalid instruction 0x{:04X} at 0x{:04X}".format(op_code, address))


class KeyReferenceException(Chip8Exception):
    """
    Raised when a key or font reference uses a value larger than 0xF.
    """
    def __init__(self, value):
        self.value = value
        Chip8Exception.__init__(
            self, "Key value 0x{:02X} out of range, must be at most 0xF".format(value))


class ProgramLoadException(Chip8Exception):
    """
    Raised when a program image cannot be loaded into memory.
    """
    def __init__(self, filename, reason):
        self.filename = filename
        self.reason = reason
        Chip8Exception.__init__(
            self, "Unable to load program {}: {}".format(filename, reason))


class StackOverflowException(Chip8Exception):
    """
    Raised when a subroutine call is made with all 16 stack entries in use.
    """
    def __init__(self, address):
        self.address = address
        Chip8Exception.__init__(
            self, "Stack overflow calling subroutine at 0x{:04X}".format(address))


class StackUnderflowException(Chip8Exception):
    """
    Raised when returning from a subroutine with an empty stack.
    """
    def __init__(self, address):
        self.address = address
        Chip8Exception.__init__(
            self, "Stack underflow returning at 0x{:04X}".format(address))


class CPUHaltedException(Chip8Exception):
    """
    Raised when an instruction is executed on a CPU that was stopped by an
    earlier fatal error.
    """
    def __init__(self):
        Chip8Exception.__init__(self, "CPU is halted")


class EmulatorFailureException(Chip8Exception):
    """
    Raised when the execution thread is stopped by an error that is not a
    Chip 8 error, for example a failure in the audio sink.
    """
    def __init__(self, cause):
        self.cause = cause
        Chip8Exception.__init__(
            self, "Execution stopped by {}: {}".format(type(cause).__name__, cause))
        self.__cause__ = cause
