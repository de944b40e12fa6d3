from enum import IntEnum

from fnfast.common import logger
from fnfast.labels import LabelMap, Momentum
from fnfast.threevector import ThreeVector


class LabelFlow(IntEnum):
    """ Direction in which a momentum flows through a propagator """
    kMinus = -1
    kNull = 0
    kPlus = 1


class Propagator(object):
    """
    Momentum of an internal line, as a signed sum of momentum labels.

    Example: Propagator({Momentum.q: -1, Momentum.k2: 1}) carries k2 - q.
    Labels with a null flow are not stored.

    Methods:
        evaluate(mom): 3-vector of the propagator for a momentum assignment.
        reverse(): same line seen from its other endpoint.
        has_label(label): whether the label enters with a nonzero flow.
        is_null(): whether no label enters.
        IRpole(label): the combination of the other labels at which the propagator vanishes.
    """

    def __init__(self, flows=None):
        self._flows = LabelMap()
        if flows:
            for label, flow in flows.items():
                flow = LabelFlow(int(flow))
                if flow != LabelFlow.kNull: self._flows[Momentum(label)] = flow

    @property
    def flows(self):
        return self._flows.copy()

    def labels(self):
        return self._flows.labels()

    def flow(self, label):
        return self._flows.get(label, LabelFlow.kNull)

    def has_label(self, label):
        return label in self._flows

    def is_null(self):
        return len(self._flows) == 0

    def evaluate(self, mom):
        """ Sum of the signed momenta of the propagator labels """
        p = ThreeVector()
        for label, flow in self._flows.items():
            if flow == LabelFlow.kPlus: p = p + mom[label]
            else: p = p - mom[label]
        return p

    def reverse(self):
        return Propagator({label: -flow for label, flow in self._flows.items()})

    def IRpole(self, label):
        """
        Solve propagator = 0 for the momentum label.

        Returns the propagator giving the value of the label at the pole, as a function of the
        other labels. A label absent from the propagator has no pole: a diagnostic is logged
        and a null propagator is returned.
        """
        if not self.has_label(label):
            logger.warning("IR pole requested for momentum %s absent from propagator %r; returning a null propagator", Momentum(label).name, self)
            return Propagator()
        flow_label = self._flows[label]
        pole = {}
        for other, flow in self._flows.items():
            if other == label: continue
            pole[other] = flow if flow_label == LabelFlow.kMinus else -flow
        return Propagator(pole)

    def __eq__(self, other):
        if not isinstance(other, Propagator): return NotImplemented
        return dict(self._flows) == dict(other._flows)

    def __hash__(self):
        return hash(frozenset(self._flows.items()))

    def __repr__(self):
        if self.is_null(): return "Propagator(0)"
        terms = ["%s%s" % ('+' if flow == LabelFlow.kPlus else '-', label.name) for label, flow in sorted(self._flows.items())]
        return "Propagator(%s)" % " ".join(terms)


class Line(object):
    """
    An edge of a diagram: the propagator flows from the start vertex to the end vertex.
    Start and end can coincide, for a loop closing on a single vertex.
    """

    __slots__ = ('start', 'end', 'propagator')

    def __init__(self, start, end, propagator):
        self.start = start
        self.end = end
        self.propagator = propagator

    def reverse(self):
        return Line(self.end, self.start, self.propagator.reverse())

    def is_self_loop(self):
        return self.start == self.end

    def __repr__(self):
        return "Line(%s, %s, %r)" % (self.start.name, self.end.name, self.propagator)
