# pytpfem.fem.reference
from .quad_qn import nodes_1d, eval_1d, quad_qn

__all__ = ['nodes_1d', 'eval_1d', 'quad_qn']
