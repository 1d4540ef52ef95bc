"""Handler tables for sub-opcode dispatch with ``jax.lax.switch``."""

from typing import Callable, Dict, List, Tuple

import numpy as np


def build_table(operations: Dict[int, Callable], size: int, default: Callable) -> Tuple[List[Callable], np.ndarray]:
    """Compile a sub-opcode -> handler mapping into switch branches and an index table.

    Handlers shared by several sub-opcodes appear once in the branch list. The
    default handler is always the last branch.

    Args:
        operations: Mapping from sub-opcode value to handler
        size: Number of possible sub-opcode values
        default: Handler for sub-opcodes missing from ``operations``

    Returns:
        (branches, table) where ``table[sub_opcode]`` indexes ``branches``
    """
    branches = []
    table = np.empty(size, dtype=np.int32)
    for sub_opcode in range(size):
        handler = operations.get(sub_opcode)
        if handler is None:
            table[sub_opcode] = -1
            continue
        if handler not in branches:
            branches.append(handler)
        table[sub_opcode] = branches.index(handler)
    branches.append(default)
    table[table == -1] = len(branches) - 1
    return branches, table
