from .configs import *
from .normalize import *
from .power_method import *
from .solver import *

# Collect __all__ from imported modules
__all__ = []
for module in [configs, normalize, power_method, solver]:
    if hasattr(module, "__all__"):
        __all__.extend(module.__all__)
