"""Dominant eigenpairs of sparse matrices with the power method."""
from .errors import *
from .models import *
from .solvers import *
from .sparse import *

# Collect __all__ from imported modules
__all__ = []
for module in [errors, models, solvers, sparse]:
    if hasattr(module, "__all__"):
        __all__.extend(module.__all__)
