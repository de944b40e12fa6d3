from enum import Enum

from fnfast.labels import LabelMap, Momentum, Order, Vertex, VertexType, KernelType
from fnfast.propagator import Propagator, Line
from fnfast.diagram import DiagramTree, DiagramOneLoop, DiagramTwoLoop

v1, v2, v3, v4 = Vertex.v1, Vertex.v2, Vertex.v3, Vertex.v4


class Graphs_2point(Enum):
    P11 = 'P11'
    P31 = 'P31'
    P22 = 'P22'
    P51 = 'P51'
    P42 = 'P42'
    P33a = 'P33a'
    P33b = 'P33b'
    P31x = 'P31x'


class Graphs_3point(Enum):
    B211 = 'B211'
    B411 = 'B411'
    B321a = 'B321a'
    B321b = 'B321b'
    B222 = 'B222'
    B411x = 'B411x'
    B321ax = 'B321ax'


class Graphs_4point(Enum):
    T3111 = 'T3111'
    T2211 = 'T2211'
    T5111 = 'T5111'
    T4211a = 'T4211a'
    T4211b = 'T4211b'
    T3311a = 'T3311a'
    T3311b = 'T3311b'
    T3221a = 'T3221a'
    T3221b = 'T3221b'
    T3221c = 'T3221c'
    T2222 = 'T2222'
    T5111x = 'T5111x'
    T4211ax = 'T4211ax'
    T3311ax = 'T3311ax'
    T3221ax = 'T3221ax'


def line(start, end, **flows):
    """ Line(start, end, Propagator) from keyword flows, e.g. line(v1, v2, q=-1, k2=1) carries k2 - q """
    return Line(start, end, Propagator({Momentum[label]: flow for label, flow in flows.items()}))


class DiagramSetBase(object):
    """
    A catalog of named diagrams contributing to a correlator, up to a given perturbative order.

    Attributes:
        order (Order): highest order of the diagrams in the set.
        Graphs (Enum): names of the diagrams the set can hold.

    Methods:
        graphs(): Names of the diagrams built at this order.
        tree(), oneLoop(), twoLoop(): Diagrams at each order.
        value_tree(mom, kernels, PL): Sum of the tree diagrams.
        value_oneLoop(mom, kernels, PL): Sum of the one-loop diagrams.
        value_twoLoop(mom, kernels, PL): Sum of the two-loop diagrams.
        set_qmax(qmax): Set the loop momentum cutoff of all loop diagrams.
    """

    Graphs = None
    npoint = None

    def __init__(self, order=Order.kOneLoop, kerneltypes=None):
        self.order = Order.parse(order)
        vertices = [Vertex(i) for i in range(1, self.npoint + 1)]
        if kerneltypes is None: kerneltypes = {vertex: KernelType.delta for vertex in vertices}
        self._kerneltypes = LabelMap(kerneltypes)
        self._extmomlabels = [Momentum(i) for i in range(1, self.npoint + 1)]
        self._vertextypes = LabelMap({vertex: VertexType.type1 for vertex in vertices})
        self._tree, self._oneLoop, self._twoLoop = [], [], []
        self._diagrams = {}

    def _add(self, graph, diagram):
        if isinstance(diagram, DiagramTree): self._tree.append(diagram)
        elif isinstance(diagram, DiagramOneLoop): self._oneLoop.append(diagram)
        else: self._twoLoop.append(diagram)
        self._diagrams[graph] = diagram
        return diagram

    def _tree_diagram(self, graph, lines):
        return self._add(graph, DiagramTree(lines, self._vertextypes, self._kerneltypes))

    def _oneLoop_diagram(self, graph, lines):
        return self._add(graph, DiagramOneLoop(lines, self._vertextypes, self._kerneltypes))

    def _twoLoop_diagram(self, graph, lines):
        return self._add(graph, DiagramTwoLoop(lines, self._vertextypes, self._kerneltypes))

    def __getitem__(self, graph):
        if isinstance(graph, str): graph = self.Graphs(graph)
        if graph not in self._diagrams:
            raise KeyError("Diagram %s is not available in %s at order %s." % (graph.value, self.__class__.__name__, self.order.name))
        return self._diagrams[graph]

    def __contains__(self, graph):
        if isinstance(graph, str):
            try: graph = self.Graphs(graph)
            except ValueError: return False
        return graph in self._diagrams

    def graphs(self):
        return [graph.value for graph in self._diagrams]

    def external_labels(self):
        return list(self._extmomlabels)

    def tree(self):
        return list(self._tree)

    def oneLoop(self):
        return list(self._oneLoop)

    def twoLoop(self):
        return list(self._twoLoop)

    def value_tree(self, mom, kernels, PL):
        return sum(diagram.value(mom, kernels, PL) for diagram in self._tree)

    def value_oneLoop(self, mom, kernels, PL):
        return sum(diagram.value(mom, kernels, PL) for diagram in self._oneLoop)

    def value_twoLoop(self, mom, kernels, PL):
        return sum(diagram.value(mom, kernels, PL) for diagram in self._twoLoop)

    def set_qmax(self, qmax):
        if self.is_evaluated():
            raise RuntimeError("set_qmax() can only be called before the first evaluation of the loop diagrams of %s." % self.__class__.__name__)
        for diagram in self._oneLoop + self._twoLoop: diagram.set_qmax(qmax)

    def is_evaluated(self):
        """ Whether a loop diagram of the set has been evaluated, after which qmax is frozen """
        return any(diagram.is_evaluated() for diagram in self._oneLoop + self._twoLoop)


class DiagramSet2pointSPT(DiagramSetBase):
    """ Power spectrum: P11; P31, P22 at one loop; P51, P42, P33a, P33b at two loops """

    Graphs = Graphs_2point
    npoint = 2

    def __init__(self, order=Order.kOneLoop, kerneltypes=None):
        DiagramSetBase.__init__(self, order, kerneltypes)
        G = Graphs_2point

        self._tree_diagram(G.P11, [line(v1, v2, k2=1)])

        if self.order >= Order.kOneLoop:
            self._oneLoop_diagram(G.P31, [line(v1, v1, q=1), line(v1, v2, k2=1)])
            self._oneLoop_diagram(G.P22, [line(v1, v2, q=1), line(v1, v2, q=-1, k2=1)])

        if self.order >= Order.kTwoLoop:
            self._twoLoop_diagram(G.P51, [line(v1, v1, q=1), line(v1, v1, q2=1), line(v1, v2, k2=1)])
            self._twoLoop_diagram(G.P42, [line(v1, v1, q2=1), line(v1, v2, q=1), line(v1, v2, q=-1, k2=1)])
            self._twoLoop_diagram(G.P33a, [line(v1, v1, q=1), line(v2, v2, q2=1), line(v1, v2, k2=1)])
            self._twoLoop_diagram(G.P33b, [line(v1, v2, q=1), line(v1, v2, q2=1), line(v1, v2, q=-1, q2=-1, k2=1)])


class DiagramSet2pointEFT(DiagramSetBase):
    """ Power spectrum counterterm P31x, with the counterterm vertex v1 distinguished from v2 """

    Graphs = Graphs_2point
    npoint = 2

    def __init__(self, order=Order.kTree, kerneltypes=None):
        DiagramSetBase.__init__(self, order, kerneltypes)
        self._vertextypes = LabelMap({v1: VertexType.type1, v2: VertexType.type2})

        self._tree_diagram(Graphs_2point.P31x, [line(v1, v2, k2=1)])


class DiagramSet3pointSPT(DiagramSetBase):
    """ Bispectrum: B211; B411, B321a, B321b, B222 at one loop """

    Graphs = Graphs_3point
    npoint = 3

    def __init__(self, order=Order.kOneLoop, kerneltypes=None):
        DiagramSetBase.__init__(self, order, kerneltypes)
        G = Graphs_3point

        self._tree_diagram(G.B211, [line(v1, v2, k2=1), line(v1, v3, k3=1)])

        if self.order >= Order.kOneLoop:
            self._oneLoop_diagram(G.B411, [line(v1, v1, q=1), line(v1, v2, k2=1), line(v1, v3, k3=1)])
            self._oneLoop_diagram(G.B321a, [line(v1, v1, q=1), line(v1, v2, k2=1, k3=1), line(v2, v3, k3=1)])
            self._oneLoop_diagram(G.B321b, [line(v1, v2, q=1), line(v1, v2, q=-1, k2=1), line(v1, v3, k3=1)])
            self._oneLoop_diagram(G.B222, [line(v1, v2, q=1), line(v2, v3, q=1, k2=-1), line(v1, v3, q=-1, k2=1, k3=1)])


class DiagramSet3pointEFT(DiagramSetBase):
    """ Bispectrum counterterms B411x, B321ax, with the counterterm vertex v1 distinguished """

    Graphs = Graphs_3point
    npoint = 3

    def __init__(self, order=Order.kTree, kerneltypes=None):
        DiagramSetBase.__init__(self, order, kerneltypes)
        self._vertextypes = LabelMap({v1: VertexType.type1, v2: VertexType.type2, v3: VertexType.type2})
        G = Graphs_3point

        self._tree_diagram(G.B411x, [line(v1, v2, k2=1), line(v1, v3, k3=1)])
        self._tree_diagram(G.B321ax, [line(v1, v2, k2=1, k3=1), line(v2, v3, k3=1)])


class DiagramSet4pointSPT(DiagramSetBase):
    """ Trispectrum: T3111, T2211; T5111, T4211a/b, T3311a/b, T3221a/b/c, T2222 at one loop """

    Graphs = Graphs_4point
    npoint = 4

    def __init__(self, order=Order.kOneLoop, kerneltypes=None):
        DiagramSetBase.__init__(self, order, kerneltypes)
        G = Graphs_4point

        self._tree_diagram(G.T3111, [line(v1, v2, k2=1), line(v1, v3, k3=1), line(v1, v4, k4=1)])
        self._tree_diagram(G.T2211, [line(v1, v2, k2=1, k3=1), line(v2, v3, k3=1), line(v1, v4, k4=1)])

        if self.order >= Order.kOneLoop:
            self._oneLoop_diagram(G.T5111, [line(v1, v1, q=1), line(v1, v2, k2=1), line(v1, v3, k3=1), line(v1, v4, k4=1)])
            self._oneLoop_diagram(G.T4211a, [line(v1, v1, q=1), line(v1, v2, k2=1, k3=1), line(v2, v3, k3=1), line(v1, v4, k4=1)])
            self._oneLoop_diagram(G.T4211b, [line(v1, v2, q=1), line(v1, v2, q=-1, k2=1), line(v1, v3, k3=1), line(v1, v4, k4=1)])
            self._oneLoop_diagram(G.T3311a, [line(v1, v1, q=1), line(v1, v2, k2=1, k3=1, k4=1), line(v2, v3, k3=1), line(v2, v4, k4=1)])
            self._oneLoop_diagram(G.T3311b, [line(v1, v2, q=1), line(v1, v2, q=-1, k2=1, k3=1), line(v2, v3, k3=1), line(v1, v4, k4=1)])
            self._oneLoop_diagram(G.T3221a, [line(v1, v1, q=1), line(v1, v2, k2=1, k3=1, k4=1), line(v2, v3, k3=1, k4=1), line(v3, v4, k4=1)])
            self._oneLoop_diagram(G.T3221b, [line(v1, v2, q=1), line(v1, v2, q=-1, k2=1), line(v1, v3, k3=1, k4=1), line(v3, v4, k4=1)])
            self._oneLoop_diagram(G.T3221c, [line(v1, v2, q=1), line(v2, v3, q=1, k2=-1), line(v1, v3, q=-1, k2=1, k3=1), line(v1, v4, k4=1)])
            self._oneLoop_diagram(G.T2222, [line(v1, v2, q=1), line(v2, v3, q=1, k2=-1), line(v3, v4, q=1, k2=-1, k3=-1), line(v1, v4, q=-1, k2=1, k3=1, k4=1)])


class DiagramSet4pointEFT(DiagramSetBase):
    """
    Trispectrum counterterms T5111x, T4211ax, T3311ax, T3221ax.

    The counterterm vertex v1 is distinguished from the others, which would change the permutations
    derived from the lines; each counterterm instead takes the permutations of its SPT analogue.
    """

    Graphs = Graphs_4point
    npoint = 4

    def __init__(self, order=Order.kTree, kerneltypes=None):
        DiagramSetBase.__init__(self, order, kerneltypes)
        self._vertextypes = LabelMap({v1: VertexType.type1, v2: VertexType.type2, v3: VertexType.type2, v4: VertexType.type2})
        G = Graphs_4point
        SPTdiagrams = DiagramSet4pointSPT(Order.kOneLoop)

        T5111x = self._tree_diagram(G.T5111x, [line(v1, v2, k2=1), line(v1, v3, k3=1), line(v1, v4, k4=1)])
        T5111x.set_perms(SPTdiagrams[G.T5111].get_perms())

        T4211ax = self._tree_diagram(G.T4211ax, [line(v1, v2, k2=1, k3=1), line(v2, v3, k3=1), line(v1, v4, k4=1)])
        T4211ax.set_perms(SPTdiagrams[G.T4211a].get_perms())

        T3311ax = self._tree_diagram(G.T3311ax, [line(v1, v2, k2=1, k3=1, k4=1), line(v2, v3, k3=1), line(v2, v4, k4=1)])
        T3311ax.set_perms(SPTdiagrams[G.T3311a].get_perms())

        T3221ax = self._tree_diagram(G.T3221ax, [line(v1, v2, k2=1, k3=1, k4=1), line(v2, v3, k3=1, k4=1), line(v3, v4, k4=1)])
        T3221ax.set_perms(SPTdiagrams[G.T3221a].get_perms())
