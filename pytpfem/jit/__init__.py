# pytpfem/jit/__init__.py
from .kernels import grad_sum_factorized, grad_direct, make_specialized_kernel
from .registry import KernelRegistry, DEFAULT_SPECIALIZATIONS

__all__ = ['grad_sum_factorized', 'grad_direct', 'make_specialized_kernel',
           'KernelRegistry', 'DEFAULT_SPECIALIZATIONS']
