from enum import Enum, IntEnum


class Order(IntEnum):
    """ Perturbative order of a diagram or of a calculation """
    kTree = 0
    kOneLoop = 1
    kTwoLoop = 2

    @classmethod
    def parse(cls, order):
        """ Order from an Order, its integer value, or one of 'tree', 'oneLoop', 'twoLoop' """
        if isinstance(order, str):
            names = {'tree': cls.kTree, 'oneLoop': cls.kOneLoop, 'twoLoop': cls.kTwoLoop}
            if order not in names: raise Exception("Order '%s' not recognized. Choose among %s." % (order, list(names)))
            return names[order]
        return cls(order)


class Vertex(IntEnum):
    v1 = 1
    v2 = 2
    v3 = 3
    v4 = 4


class Momentum(IntEnum):
    """ q, q2 are the loop momenta (q2 only in two-loop diagrams), k1..k4 the external ones """
    q2 = -1
    q = 0
    k1 = 1
    k2 = 2
    k3 = 3
    k4 = 4

    def is_loop(self):
        return self <= Momentum.q


class VertexType(Enum):
    """ Vertices of different types are never interchanged when symmetrizing a diagram """
    type1 = 1
    type2 = 2


class KernelType(Enum):
    """ Flavour of the kernel at a vertex: density (Fn) or velocity divergence (Gn) """
    delta = 1
    theta = 2


vertexlabels = list(Vertex)
external_momenta = [Momentum.k1, Momentum.k2, Momentum.k3, Momentum.k4]


class VertexPair(object):
    """ Unordered pair of vertices, the endpoints of a line """

    __slots__ = ('vA', 'vB')

    def __init__(self, vA, vB):
        self.vA = vA
        self.vB = vB

    def key(self):
        return (min(self.vA, self.vB), max(self.vA, self.vB))

    def __eq__(self, other):
        return self.key() == other.key()

    def __lt__(self, other):
        return self.key() < other.key()

    def __hash__(self):
        return hash(self.key())

    def __repr__(self):
        return "VertexPair(%s, %s)" % (self.vA.name, self.vB.name)


class LabelMap(dict):
    """
    A map keyed by labels (vertices or momenta).

    Looking up a label that is absent is a programming error and fails an assertion.
    """

    def __missing__(self, key):
        raise AssertionError("label %s not found in %s" % (getattr(key, 'name', key), self.__class__.__name__))

    def labels(self):
        return sorted(self.keys())

    def permute(self, perm):
        """ Relabel in place: self[a] <- self[perm[a]] for every a in perm """
        current = dict(self)
        for label, image in perm.items():
            self[label] = current[image] if image in current else self.__missing__(image)
        return self

    def copy(self):
        return self.__class__(self)

    def __repr__(self):
        return "%s({%s})" % (self.__class__.__name__, ", ".join("%s: %r" % (getattr(k, 'name', k), v) for k, v in sorted(self.items())))
