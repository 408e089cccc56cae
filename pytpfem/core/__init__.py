from .mesh import QuadMesh
from .topology import Node
from .fespace import FiniteElementSpace
__all__=['QuadMesh','Node','FiniteElementSpace']
