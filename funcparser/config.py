import torch

from typing import Dict, Optional


class ParserConfig:

    def __init__(
        self,
        default_functions: bool = True,
        constants: Optional[Dict[str, float]] = None,
        dtype: torch.dtype = torch.float64,
        device: torch.device = torch.device("cpu"),
    ):
        self.default_functions = default_functions
        self.constants = dict(constants or {})
        self.dtype = dtype
        self.device = device
