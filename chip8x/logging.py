"""Console logging utilities for the CHIP-8 engine.

Provides a small levelled console logger and a machine-specific subclass that
knows how to report power-on, faults, halts and register dumps.
"""

import time
import sys
from typing import Optional


class ConsoleLogger:
    """Levelled console logger with optional colors and elapsed-time stamps."""

    def __init__(
        self,
        name: str = "chip8x",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.stream = stream
        target = stream if stream is not None else sys.stdout
        self.use_colors = (
            use_colors and hasattr(target, "isatty") and target.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, file=self.stream, flush=True)

    def debug(self, message: str):
        """Log debug message."""
        self.log("DEBUG", message)

    def info(self, message: str):
        """Log info message."""
        self.log("INFO", message)

    def warning(self, message: str):
        """Log warning message."""
        self.log("WARNING", message)

    def error(self, message: str):
        """Log error message."""
        self.log("ERROR", message)

    def critical(self, message: str):
        """Log critical message."""
        self.log("CRITICAL", message)


def format_registers(state) -> str:
    """One-line dump of PC, I, SP, timers and V0-VF."""
    registers = " ".join(f"V{i:X}={int(v):02X}" for i, v in enumerate(state.V))
    return (
        f"PC={int(state.pc):03X} I={int(state.I):03X} SP={int(state.stack.pointer):X} "
        f"DT={int(state.delay_timer):02X} ST={int(state.sound_timer):02X} | {registers}"
    )


class MachineLogger(ConsoleLogger):
    """Logger for engine lifecycle events. Quiet unless something goes wrong."""

    def __init__(self, name: str = "chip8x", log_level: str = "WARNING", **kwargs):
        super().__init__(name, log_level=log_level, **kwargs)

    def log_power_on(self, quirks, rom_size: int):
        """Log ROM load and the quirk policy in effect."""
        self.info(f"Powered on in {quirks.mode.value} mode with a {rom_size}-byte ROM")
        self.debug(
            "Quirks: "
            + ", ".join(f"{key}={value}" for key, value in vars(quirks).items() if key != "mode")
        )

    def log_fault(self, fault: Exception):
        """Log a fault raised by a cycle."""
        self.error(str(fault))

    def log_halt(self, address: int):
        """Log the program exiting the interpreter."""
        self.warning(f"Program exited at {address:03X}")

    def log_registers(self, state, instruction: Optional[object] = None):
        """Log a register dump at DEBUG level."""
        if not self._should_log("DEBUG"):
            return
        prefix = f"{instruction} " if instruction is not None else ""
        self.debug(prefix + format_registers(state))
