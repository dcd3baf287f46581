"""
watc code generation backends.
"""

from .wat_backend import WATBackend, generate_wat, collect_imports, wrap_i32

__all__ = ['WATBackend', 'generate_wat', 'collect_imports', 'wrap_i32']
