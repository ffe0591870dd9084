from .torch_executor import TorchExecutor
from .sweep import axis, sweep
