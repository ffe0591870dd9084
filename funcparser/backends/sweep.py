import numpy as np
import torch

from typing import Dict, Mapping, Sequence, Tuple

from ..logger import LOGGER


def axis(start: float, stop: float, step: float) -> np.ndarray:
    """
    Values start, start + step, ... up to and including stop.
    """
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")
    if stop < start:
        raise ValueError(f"stop ({stop}) is smaller than start ({start})")
    # tolerance keeps stop itself when (stop - start) / step is a float like 2.9999999
    count = int(np.floor((stop - start) / step + 1e-9)) + 1
    return start + step * np.arange(count, dtype=np.float64)


def sweep(
    parser, ranges: Mapping[str, Sequence[float]]
) -> Tuple[Dict[str, torch.Tensor], torch.Tensor]:
    """
    Evaluate a parsed expression over the Cartesian product of variable ranges.

    ranges maps a variable name to (start, stop, step). Axes follow the order
    in which the variables appear in the expression, the last one varying
    fastest. Variables without a range keep their scalar binding.

    Returns (grid, values): grid maps each swept name to its meshgrid tensor,
    values holds the result for every grid point.
    """
    if parser.failed:
        raise parser.error

    known = parser.variable_names()
    for name in ranges:
        if name not in known:
            LOGGER.warn(f"no such variable '{name}', range ignored")

    names = [n for n in known if n in ranges]
    axes = [
        torch.as_tensor(
            axis(*ranges[n]), dtype=parser.config.dtype, device=parser.config.device
        )
        for n in names
    ]
    grids = torch.meshgrid(*axes, indexing="ij") if axes else ()
    grid = dict(zip(names, grids))

    values = parser.evaluate_batch(grid)
    if grids:
        values = torch.broadcast_to(values, grids[0].shape)
    return grid, values
