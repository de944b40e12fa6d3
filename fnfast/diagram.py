from math import factorial, inf
from itertools import permutations

from fnfast.labels import LabelMap, Momentum, Order, VertexPair, VertexType, KernelType, vertexlabels, external_momenta
from fnfast.threevector import ThreeVector


def theta(p1, p2):
    """ theta(|p1| < |p2|) """
    return 1. if p1.square() < p2.square() else 0.


class DiagramBase(object):
    """
    A diagram of the perturbative expansion of a correlator, built from its lines.

    The vertices must be labelled v1..vN without gaps, and the external momentum entering vertex vi is ki.
    From the lines, the diagram derives at construction the momenta flowing out of each vertex,
    the symmetry factor, and the minimal set of permutations of the external momenta over which
    the diagram has to be summed to be fully symmetrized.

    Attributes:
        order (Order): perturbative order of the diagram.

    Methods:
        symmetry_factor(): Number of equivalent ways of drawing the diagram.
        nperms(): Number of external momentum permutations.
        get_perms(): External momentum permutations.
        set_perms(perms): Override the permutations (before any evaluation).
        value_base(mom, kernels, PL): Diagram with the input momentum routing.
        value_base_IRreg(mom, kernels, PL): Same, with the IR poles mapped to the origin.
        value(mom, kernels, PL): IR regulated diagram summed over the external momentum permutations.

    Private Methods:
        calc_symmetry_factor(): Compute the symmetry factor.
        calc_permutations(): Compute the external momentum permutations.
    """

    order = None

    def __init__(self, lines, vertextypes=None, kerneltypes=None):

        self._lines = list(lines)
        assert len(self._lines) > 0, "A diagram needs at least one line."

        self._vertexmomenta = LabelMap()
        self._vertexpairs = []
        for line in self._lines:
            # the momentum flows out of the start vertex and into the end vertex
            self._vertexmomenta.setdefault(line.start, []).append(line.propagator)
            self._vertexmomenta.setdefault(line.end, []).append(line.propagator.reverse())
            self._vertexpairs.append(VertexPair(line.start, line.end))

        self._vertices = self._vertexmomenta.labels()
        nvertices = len(self._vertices)
        assert self._vertices == vertexlabels[:nvertices], "Vertices must be labelled v1..v%d without gaps, got %s." % (nvertices, [v.name for v in self._vertices])
        self._extmomlabels = external_momenta[:nvertices]

        if vertextypes is None: vertextypes = {vertex: VertexType.type1 for vertex in self._vertices}
        if kerneltypes is None: kerneltypes = {vertex: KernelType.delta for vertex in self._vertices}
        for vertex in self._vertices:
            assert vertex in vertextypes, "No vertex type given for vertex %s." % vertex.name
            assert vertex in kerneltypes, "No kernel type given for vertex %s." % vertex.name
        self._vertextypes = LabelMap({vertex: vertextypes[vertex] for vertex in self._vertices})
        self._kerneltypes = LabelMap({vertex: kerneltypes[vertex] for vertex in self._vertices})

        self._symfac = self.calc_symmetry_factor()
        self._perms = self.calc_permutations()
        self._is_evaluated = False

    def lines(self):
        return list(self._lines)

    def vertices(self):
        return list(self._vertices)

    def vertex_momenta(self, vertex):
        return list(self._vertexmomenta[vertex])

    def external_labels(self):
        return list(self._extmomlabels)

    def vertex_types(self):
        return self._vertextypes.copy()

    def kernel_types(self):
        return self._kerneltypes.copy()

    def symmetry_factor(self):
        return self._symfac

    def nperms(self):
        return len(self._perms)

    def get_perms(self):
        return [perm.copy() for perm in self._perms]

    def set_perms(self, perms):
        """ Use the given external momentum permutations instead of the ones derived from the lines """
        self._check_not_evaluated('set_perms')
        self._perms = [LabelMap(perm) for perm in perms]

    def is_evaluated(self):
        return self._is_evaluated

    def _check_not_evaluated(self, setter):
        if self._is_evaluated:
            raise RuntimeError("%s() can only be called before the first evaluation of the diagram." % setter)

    def calc_symmetry_factor(self):
        """
        Compute the symmetry factor prod_i N_i! / prod_{i<=j} P_ij!, where N_i is the number of line ends
        at vertex i and P_ij the number of lines between vertices i and j.
        A line from a vertex to itself counts twice in both N_i and P_ii.
        """
        vertexcounts = {vertex: 0 for vertex in self._vertices}
        for vx_pair in self._vertexpairs:
            vertexcounts[vx_pair.vA] += 1
            vertexcounts[vx_pair.vB] += 1

        numerator = 1
        for vertex in self._vertices: numerator *= factorial(vertexcounts[vertex])

        denominator = 1
        for i, vertex_i in enumerate(self._vertices):
            for vertex_j in self._vertices[:i + 1]:
                vxpair = VertexPair(vertex_i, vertex_j)
                linecount = sum(1 for vx_pair in self._vertexpairs if vx_pair == vxpair)
                if vertex_i == vertex_j: linecount *= 2
                denominator *= factorial(linecount)

        return numerator / denominator

    def calc_permutations(self):
        """
        Compute the permutations of the external momenta giving distinct diagram values.

        Each permutation of the vertex labels is applied to the endpoints of the lines, decorated by the
        vertex and kernel types of the endpoints. A permutation is kept only if the sorted list of
        decorated endpoints differs from all the ones already kept, and is stored as the corresponding
        map of the external momentum labels.
        """
        perms, connections = [], []
        nvertices = len(self._vertices)
        for indices in permutations(range(nvertices)):
            vertexmap = {self._vertices[i]: self._vertices[indices[i]] for i in range(nvertices)}
            connection = sorted(tuple(sorted((self._decorate(vertexmap, line.start), self._decorate(vertexmap, line.end)))) for line in self._lines)
            if connection not in connections:
                connections.append(connection)
                perms.append(LabelMap({self._extmomlabels[i]: self._extmomlabels[indices[i]] for i in range(nvertices)}))
        return perms

    def _decorate(self, vertexmap, vertex):
        return (vertexmap[vertex], self._vertextypes[vertex].value, self._kerneltypes[vertex].value)

    def _value_graph(self, mom, kernels, PL):
        """ symmetry factor * linear power spectra of the lines * kernels at the vertices """
        self._is_evaluated = True
        value = self._symfac
        for line in self._lines:
            value *= PL(line.propagator.evaluate(mom).magnitude())
        for vertex in self._vertices:
            p = [prop.evaluate(mom) for prop in self._vertexmomenta[vertex]]
            if self._kerneltypes[vertex] == KernelType.delta: value *= kernels[vertex].Fn_sym(p)
            else: value *= kernels[vertex].Gn_sym(p)
        return value

    def value_base(self, mom, kernels, PL):
        raise NotImplementedError

    def value_base_IRreg(self, mom, kernels, PL):
        raise NotImplementedError

    def value(self, mom, kernels, PL):
        raise NotImplementedError

    def __repr__(self):
        return "%s(%s)" % (self.__class__.__name__, ", ".join(repr(line) for line in self._lines))


class DiagramTree(DiagramBase):
    """ A diagram without loop momenta """

    order = Order.kTree

    def __init__(self, lines, vertextypes=None, kerneltypes=None):
        DiagramBase.__init__(self, lines, vertextypes, kerneltypes)
        for line in self._lines:
            assert not (line.propagator.has_label(Momentum.q) or line.propagator.has_label(Momentum.q2)), "Tree diagram with a loop momentum in %r." % line

    def value_base(self, mom, kernels, PL):
        return self._value_graph(mom, kernels, PL)

    def value_base_IRreg(self, mom, kernels, PL):
        """ No loop momentum, no IR pole to regulate """
        return self.value_base(mom, kernels, PL)

    def value(self, mom, kernels, PL):
        value = 0.
        for perm in self._perms:
            value += self.value_base(LabelMap(mom).permute(perm), kernels, PL)
        return value


class DiagramLoopBase(DiagramBase):
    """
    Common part of the loop diagrams: hard cutoff on the loop momenta and IR regulation.

    An IR pole is a value of a loop momentum at which a propagator vanishes. Phase space is split into
    regions, each containing exactly one of the (unique) poles, and in each region the loop momentum is
    shifted so that the pole sits at the origin: sum_i prod_{j!=i} theta(|q| < |q + P_i - P_j|) f(q + P_i),
    with the pole at q = 0 always included.
    """

    def __init__(self, lines, vertextypes=None, kerneltypes=None):
        DiagramBase.__init__(self, lines, vertextypes, kerneltypes)
        self._qmax = inf

    @property
    def qmax(self):
        return self._qmax

    def set_qmax(self, qmax):
        """ Set the cutoff on the loop momenta magnitude (before any evaluation) """
        self._check_not_evaluated('set_qmax')
        self._qmax = qmax

    def _find_IRpoles(self, label):
        """ Non-null poles in the loop momentum label of the lines carrying it """
        poles = []
        for line in self._lines:
            if line.propagator.has_label(label):
                pole = line.propagator.IRpole(label)
                if not pole.is_null(): poles.append(pole)
        return poles

    @staticmethod
    def _unique_poles(poles, mom):
        """ Evaluated poles, without duplicates, starting with the pole at the origin """
        unique = [ThreeVector()]
        for pole_prop in poles:
            pole = pole_prop.evaluate(mom)
            if not any(pole == unique_pole for unique_pole in unique): unique.append(pole)
        return unique

    def _regulate(self, mom, label, poles, evaluate):
        if not poles: return evaluate(mom)
        uniquepoles = self._unique_poles(poles, mom)
        q = mom[label]
        value = 0.
        for i, pole in enumerate(uniquepoles):
            PSregion = 1.
            for j, pole_j in enumerate(uniquepoles):
                if j != i: PSregion *= theta(q, q + pole - pole_j)
            if PSregion == 0.: continue
            mom_shift = LabelMap(mom)
            mom_shift[label] = q + pole
            value += PSregion * evaluate(mom_shift)
        return value

    def PSregions(self, mom, label=Momentum.q):
        """ Indicator of each IR region at the loop momentum of mom (the region of the pole at the origin first) """
        poles = self._find_IRpoles(label)
        uniquepoles = self._unique_poles(poles, mom)
        q = mom[label]
        regions = []
        for i, pole in enumerate(uniquepoles):
            PSregion = 1.
            for j, pole_j in enumerate(uniquepoles):
                if j != i: PSregion *= theta(q, q + pole - pole_j)
            regions.append(PSregion)
        return regions


class DiagramOneLoop(DiagramLoopBase):
    """ A diagram with the loop momentum q """

    order = Order.kOneLoop

    def __init__(self, lines, vertextypes=None, kerneltypes=None):
        DiagramLoopBase.__init__(self, lines, vertextypes, kerneltypes)
        is_loop = any(line.propagator.has_label(Momentum.q) for line in self._lines)
        is_2loop = any(line.propagator.has_label(Momentum.q2) for line in self._lines)
        assert is_loop and not is_2loop, "One-loop diagram must carry q and not q2: %r." % self
        self._IRpoles = self._find_IRpoles(Momentum.q)

    def IRpoles(self):
        return list(self._IRpoles)

    def value_base(self, mom, kernels, PL):
        """ Diagram with the input routing, zero above the loop momentum cutoff """
        self._is_evaluated = True
        if mom[Momentum.q].magnitude() > self._qmax: return 0.
        return self._value_graph(mom, kernels, PL)

    def value_base_IRreg(self, mom, kernels, PL):
        """ Diagram with the input routing, with each IR pole mapped onto q = 0 in its own region """
        return self._regulate(mom, Momentum.q, self._IRpoles, lambda m: self.value_base(m, kernels, PL))

    def value(self, mom, kernels, PL):
        """ IR regulated diagram summed over the external momentum permutations, symmetrized in q -> -q """
        value = 0.
        for perm in self._perms:
            mom_perm = LabelMap(mom).permute(perm)
            value += 0.5 * self.value_base_IRreg(mom_perm, kernels, PL)
            mom_perm[Momentum.q] = -mom_perm[Momentum.q]
            value += 0.5 * self.value_base_IRreg(mom_perm, kernels, PL)
        return value


class DiagramTwoLoop(DiagramLoopBase):
    """
    A diagram with the loop momenta q and q2.

    The IR poles are regulated first in q, at fixed q2, then in each region of q in q2, with the poles
    in q2 evaluated at the shifted q.
    """

    order = Order.kTwoLoop

    def __init__(self, lines, vertextypes=None, kerneltypes=None):
        DiagramLoopBase.__init__(self, lines, vertextypes, kerneltypes)
        is_loop = any(line.propagator.has_label(Momentum.q) for line in self._lines)
        is_2loop = any(line.propagator.has_label(Momentum.q2) for line in self._lines)
        assert is_loop and is_2loop, "Two-loop diagram must carry both q and q2: %r." % self
        self._IRpoles = self._find_IRpoles(Momentum.q)
        self._IRpoles2 = self._find_IRpoles(Momentum.q2)

    def IRpoles(self):
        return list(self._IRpoles)

    def IRpoles2(self):
        return list(self._IRpoles2)

    def value_base(self, mom, kernels, PL):
        self._is_evaluated = True
        if mom[Momentum.q].magnitude() > self._qmax or mom[Momentum.q2].magnitude() > self._qmax: return 0.
        return self._value_graph(mom, kernels, PL)

    def value_base_IRreg(self, mom, kernels, PL):
        def regulate_q2(mom_q):
            return self._regulate(mom_q, Momentum.q2, self._IRpoles2, lambda m: self.value_base(m, kernels, PL))
        return self._regulate(mom, Momentum.q, self._IRpoles, regulate_q2)

    def value(self, mom, kernels, PL):
        """ IR regulated diagram summed over the external momentum permutations, symmetrized in (q, q2) -> (-q, -q2) """
        value = 0.
        for perm in self._perms:
            mom_perm = LabelMap(mom).permute(perm)
            value += 0.5 * self.value_base_IRreg(mom_perm, kernels, PL)
            mom_perm[Momentum.q] = -mom_perm[Momentum.q]
            mom_perm[Momentum.q2] = -mom_perm[Momentum.q2]
            value += 0.5 * self.value_base_IRreg(mom_perm, kernels, PL)
        return value
