import sys
import time

import jax

from chip8x import Chip8, create_state, load_rom_file, run_n_cycles
from chip8x.logging import MachineLogger

CYCLES_PER_FRAME = 10


def frame_to_text(pixels, hires):
    """Render the pixel grid as text, one character per logical pixel."""
    step = 1 if hires else 2
    width, height = pixels.shape
    return "\n".join(
        "".join("#" if pixels[x, y] else "." for x in range(0, width, step))
        for y in range(0, height, step)
    )


if __name__ == "__main__":
    rom_path = sys.argv[1]
    mode = sys.argv[2] if len(sys.argv) > 2 else "schip"

    # Host loop: a fixed number of cycles per 60 Hz frame
    machine = Chip8(mode=mode, seed=0, logger=MachineLogger(log_level="INFO"))
    with open(rom_path, "rb") as f:
        machine.power_and_load(f.read())

    for frame in range(120):
        for _ in range(CYCLES_PER_FRAME):
            result = machine.cycle()
            if not result.ok or machine.halted:
                break
        machine.decrement_timers()
        if not result.ok or machine.halted:
            break

    print(frame_to_text(jax.device_get(machine.display), machine.hires))

    # Batched execution without fault checks
    state = load_rom_file(create_state(mode=mode), rom_path)

    start_compile = time.time()
    compiled = jax.block_until_ready(run_n_cycles.lower(state, 10000).compile())
    print("Compilation time (s):", time.time() - start_compile)

    start_exec = time.time()
    state = jax.block_until_ready(compiled(state))
    print("Execution time (s):", time.time() - start_exec)
