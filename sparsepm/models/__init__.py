"""Models module __init__.py file."""
from .dominant_eig import *
from .model import *

# Collect __all__ from imported modules
__all__ = []
for module in [dominant_eig, model]:
    if hasattr(module, "__all__"):
        __all__.extend(module.__all__)
