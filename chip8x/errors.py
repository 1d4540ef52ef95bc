"""Exceptions raised by the CHIP-8 core."""


class Chip8Error(Exception):
    """Base class for all chip8x errors."""


class MachineFault(Chip8Error):
    """Instruction that cannot be executed by the current machine."""

    def __init__(self, word: int, address: int, message: str = None):
        self.word = int(word)
        self.address = int(address)
        super().__init__(message or f"{type(self).__name__}: {self.word:04X} at {self.address:03X}")


class IllegalOpcodeError(MachineFault):
    """Opcode with no handler in the active interpreter mode."""

    def __init__(self, word: int, address: int):
        super().__init__(word, address, f"Illegal opcode {int(word):04X} at {int(address):03X}")


class StackOverflowError(MachineFault):
    """Subroutine call with every stack slot in use."""

    def __init__(self, word: int, address: int):
        super().__init__(word, address, f"Stack overflow calling {int(word) & 0xFFF:03X} from {int(address):03X}")


class StackUnderflowError(MachineFault):
    """Return with no subroutine on the stack."""

    def __init__(self, word: int, address: int):
        super().__init__(word, address, f"Stack underflow returning from {int(address):03X}")


class RomTooLargeError(Chip8Error, ValueError):
    """ROM image does not fit between the program start and the end of memory."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"ROM is {size} bytes, at most {limit} bytes fit in memory")


class ConfigurationError(Chip8Error, ValueError):
    """Invalid engine configuration."""


class MachineNotPoweredError(Chip8Error, RuntimeError):
    """Machine was asked to run before a ROM was loaded."""
