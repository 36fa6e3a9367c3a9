"""Sparse module __init__.py file."""
from .sparse_tensor import *

# Collect __all__ from imported modules
__all__ = []
for module in [sparse_tensor]:
    if hasattr(module, "__all__"):
        __all__.extend(module.__all__)
