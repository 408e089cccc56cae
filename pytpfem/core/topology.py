import numpy as np


class Node:
    def __init__(self, id, x, y):
        self.x = x
        self.y = y
        self.id = id

    def __repr__(self):
        return f"Node {self.id}({self.x:.3f}, {self.y:.3f})"

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        return np.isclose(self.x, other.x) and np.isclose(self.y, other.y)

    def __ne__(self, other):
        eq = self.__eq__(other)
        return eq if eq is NotImplemented else not eq

    __hash__ = None
