#!/usr/bin/env python3
"""
Test script for the fnfast diagrams: symmetry factors, permutations, IR regulation and cutoffs.
"""

import numpy as np
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from test_utils import MockData, TestHelpers, run_tests

from fnfast.labels import LabelMap, Momentum, Vertex, VertexType
from fnfast.propagator import Propagator, Line
from fnfast.diagram import DiagramTree, DiagramOneLoop, DiagramTwoLoop
from fnfast.threevector import ThreeVector

v1, v2, v3, v4 = Vertex.v1, Vertex.v2, Vertex.v3, Vertex.v4
q, q2, k1, k2, k3, k4 = Momentum.q, Momentum.q2, Momentum.k1, Momentum.k2, Momentum.k3, Momentum.k4


def make_line(start, end, **flows):
    return Line(start, end, Propagator({Momentum[label]: flow for label, flow in flows.items()}))


def bispectrum_momenta():
    """Equilateral triangle of unit momenta."""
    c, s = np.cos(2 * np.pi / 3), np.sin(2 * np.pi / 3)
    p1, p2 = ThreeVector(0, 0, 1), ThreeVector(s, 0, c)
    return LabelMap({k1: p1, k2: p2, k3: -p1 - p2})


def test_tree_diagrams():
    """Test symmetry factors and permutations of tree diagrams."""
    P11 = DiagramTree([make_line(v1, v2, k2=1)])
    assert P11.symmetry_factor() == 1
    assert P11.nperms() == 1

    B211 = DiagramTree([make_line(v1, v2, k2=1), make_line(v1, v3, k3=1)])
    assert B211.symmetry_factor() == 2
    # one permutation for each external momentum at the central vertex
    assert B211.nperms() == 3
    assert sorted(perm[k1] for perm in B211.get_perms()) == [k1, k2, k3]

    T3111 = DiagramTree([make_line(v1, v2, k2=1), make_line(v1, v3, k3=1), make_line(v1, v4, k4=1)])
    assert T3111.symmetry_factor() == 6
    assert T3111.nperms() == 4

    # chain v3 - v2 - v1 - v4: 4!/2 distinct labellings
    T2211 = DiagramTree([make_line(v1, v2, k2=1, k3=1), make_line(v2, v3, k3=1), make_line(v1, v4, k4=1)])
    assert T2211.symmetry_factor() == 4
    assert T2211.nperms() == 12
    print("✓ Tree symmetry factors and permutations correct")


def test_vertex_types_split_permutations():
    """Test that vertices of different types are not interchanged."""
    P31x = DiagramTree([make_line(v1, v2, k2=1)], vertextypes={v1: VertexType.type1, v2: VertexType.type2})
    assert P31x.nperms() == 2

    B411x = DiagramTree([make_line(v1, v2, k2=1), make_line(v1, v3, k3=1)],
                        vertextypes={v1: VertexType.type1, v2: VertexType.type2, v3: VertexType.type2})
    assert B411x.nperms() == 3
    print("✓ Vertex types respected by the permutations")


def test_permutations_invariant_under_relabelling():
    """Test that relabelling the lines of a diagram keeps the number of permutations."""
    lines = [make_line(v1, v2, q=1), make_line(v2, v3, q=1, k2=-1), make_line(v1, v3, q=-1, k2=1, k3=1)]
    relabelled = [make_line(v2, v3, q=1), make_line(v3, v1, q=1, k2=-1), make_line(v2, v1, q=-1, k2=1, k3=1)]
    assert DiagramOneLoop(lines).nperms() == DiagramOneLoop(relabelled).nperms() == 1

    lines = [make_line(v1, v1, q=1), make_line(v1, v2, k2=1, k3=1), make_line(v2, v3, k3=1)]
    relabelled = [make_line(v3, v3, q=1), make_line(v3, v1, k2=1, k3=1), make_line(v1, v2, k3=1)]
    assert DiagramOneLoop(lines).nperms() == DiagramOneLoop(relabelled).nperms() == 6
    print("✓ Permutation count invariant under relabelling")


def test_loop_symmetry_factors():
    """Test the symmetry factors of diagrams with self-loops and parallel lines."""
    P31 = DiagramOneLoop([make_line(v1, v1, q=1), make_line(v1, v2, k2=1)])
    assert P31.symmetry_factor() == 3
    assert P31.nperms() == 2

    P22 = DiagramOneLoop([make_line(v1, v2, q=1), make_line(v1, v2, q=-1, k2=1)])
    assert P22.symmetry_factor() == 2
    assert P22.nperms() == 1

    # no self-loop, no parallel lines: 2! at each vertex
    B222 = DiagramOneLoop([make_line(v1, v2, q=1), make_line(v2, v3, q=1, k2=-1), make_line(v1, v3, q=-1, k2=1, k3=1)])
    assert B222.symmetry_factor() == 8
    print("✓ Loop symmetry factors correct")


def test_construction_invariants():
    """Test that inconsistent diagrams are refused at construction."""
    bad = [
        (DiagramTree, [make_line(v1, v2, q=1)]),
        (DiagramOneLoop, [make_line(v1, v2, k2=1)]),
        (DiagramOneLoop, [make_line(v1, v1, q=1), make_line(v1, v1, q2=1), make_line(v1, v2, k2=1)]),
        (DiagramTwoLoop, [make_line(v1, v1, q=1), make_line(v1, v2, k2=1)]),
        (DiagramTree, [make_line(v1, v3, k3=1)]),
        (DiagramTree, []),
    ]
    for cls, lines in bad:
        try:
            cls(lines)
            raise RuntimeError("%s(%r) should be refused" % (cls.__name__, lines))
        except AssertionError:
            pass
    print("✓ Construction invariants enforced")


def test_tree_bispectrum_value():
    """Test the tree bispectrum of an equilateral triangle with P(k) = 1: 3 x 2 F2 = 12/7."""
    B211 = DiagramTree([make_line(v1, v2, k2=1), make_line(v1, v3, k3=1)])
    PL = MockData.create_power_law(0.)
    value = B211.value(bispectrum_momenta(), TestHelpers.kernels_SPT(3), PL)
    assert TestHelpers.isclose(value, 12. / 7.), value

    # no loop momentum, no pole to regulate
    mom = bispectrum_momenta()
    assert B211.value_base_IRreg(mom, TestHelpers.kernels_SPT(3), PL) == B211.value_base(mom, TestHelpers.kernels_SPT(3), PL)

    # degenerate back-to-back momenta stay finite
    mom = MockData.create_momenta(k1=(0, 0, 1), k2=(0, 0, -1), k3=(0, 0, 0))
    assert TestHelpers.check_finite(B211.value(mom, TestHelpers.kernels_SPT(3), PL))
    print("✓ Tree bispectrum value correct")


def test_uv_cutoff():
    """Test the hard cutoff on the loop momentum."""
    P31 = DiagramOneLoop([make_line(v1, v1, q=1), make_line(v1, v2, k2=1)])
    P31.set_qmax(0.)
    assert P31.qmax == 0.
    kernels, PL = TestHelpers.kernels_SPT(2), MockData.create_power_law(0.)

    mom = MockData.create_momenta(k1=(0, 0, 1), k2=(0, 0, -1), q=(0, 0, 1e-3))
    assert P31.value_base(mom, kernels, PL) == 0.

    # boundary: |q| = 0 <= qmax = 0 is evaluated
    mom[q] = ThreeVector()
    assert TestHelpers.check_finite(P31.value_base(mom, kernels, PL))

    # the cutoff can only be set before the first evaluation
    try:
        P31.set_qmax(1.)
        assert False, "set_qmax after evaluation should raise"
    except RuntimeError:
        pass
    try:
        P31.set_perms(P31.get_perms())
        assert False, "set_perms after evaluation should raise"
    except RuntimeError:
        pass
    print("✓ UV cutoff applied")


def test_ir_regions():
    """Test that the IR regions tile loop momentum space."""
    P22 = DiagramOneLoop([make_line(v1, v2, q=1), make_line(v1, v2, q=-1, k2=1)])
    assert len(P22.IRpoles()) == 1

    mom = MockData.create_momenta(k1=(0, 0, -1), k2=(0, 0, 1))
    poles = [ThreeVector(), mom[k2]]
    rng = np.random.default_rng(3)
    for _ in range(50):
        l = ThreeVector(*rng.uniform(-2, 2, 3))
        covered = 0.
        for i, pole in enumerate(poles):
            # region i in the shifted variable q = l - P_i
            mom_q = mom.copy()
            mom_q[q] = l - pole
            covered += P22.PSregions(mom_q)[i]
        assert covered == 1., "l = %r covered %d times" % (l, covered)
    print("✓ IR regions tile phase space")


def test_loop_momentum_symmetrization():
    """Test that one-loop values are even in the loop momentum."""
    kernels, PL = TestHelpers.kernels_SPT(3), MockData.create_power_law(-1.)
    B321b = DiagramOneLoop([make_line(v1, v2, q=1), make_line(v1, v2, q=-1, k2=1), make_line(v1, v3, k3=1)])
    mom = bispectrum_momenta()
    mom[q] = ThreeVector(0.3, -0.4, 0.2)
    value = B321b.value(mom, kernels, PL)
    mom[q] = -mom[q]
    assert TestHelpers.isclose(B321b.value(mom, kernels, PL), value, rtol=1e-12)
    assert TestHelpers.check_finite(value)
    print("✓ One-loop value symmetric under q -> -q")


def test_two_loop_diagram():
    """Test two-loop diagrams: poles in both loop momenta, cutoff and symmetrization."""
    P33b = DiagramTwoLoop([make_line(v1, v2, q=1), make_line(v1, v2, q2=1), make_line(v1, v2, q=-1, q2=-1, k2=1)])
    assert P33b.symmetry_factor() == 6
    assert P33b.nperms() == 1
    assert len(P33b.IRpoles()) == 1 and len(P33b.IRpoles2()) == 1

    kernels, PL = TestHelpers.kernels_SPT(2), MockData.create_power_law(-1.)
    mom = MockData.create_momenta(k1=(0, 0, -1), k2=(0, 0, 1), q=(0.2, 0.1, -0.3), q2=(-0.1, 0.4, 0.25))
    value = P33b.value(mom, kernels, PL)
    assert TestHelpers.check_finite(value)
    mom[q], mom[q2] = -mom[q], -mom[q2]
    assert TestHelpers.isclose(P33b.value(mom, kernels, PL), value, rtol=1e-12)

    P51 = DiagramTwoLoop([make_line(v1, v1, q=1), make_line(v1, v1, q2=1), make_line(v1, v2, k2=1)])
    P51.set_qmax(0.5)
    mom = MockData.create_momenta(k1=(0, 0, -1), k2=(0, 0, 1), q=(0.2, 0., 0.), q2=(0., 0.6, 0.))
    assert P51.value_base(mom, kernels, PL) == 0.
    mom[q2] = ThreeVector(0., 0.4, 0.)
    assert P51.value_base(mom, kernels, PL) != 0.
    print("✓ Two-loop diagrams evaluated")


def main():
    """Run all diagram tests."""
    tests = [
        ("Tree diagrams", test_tree_diagrams),
        ("Vertex types", test_vertex_types_split_permutations),
        ("Relabelling", test_permutations_invariant_under_relabelling),
        ("Loop symmetry factors", test_loop_symmetry_factors),
        ("Construction invariants", test_construction_invariants),
        ("Tree bispectrum", test_tree_bispectrum_value),
        ("UV cutoff", test_uv_cutoff),
        ("IR regions", test_ir_regions),
        ("q -> -q", test_loop_momentum_symmetrization),
        ("Two loops", test_two_loop_diagram),
    ]
    return run_tests(tests, "diagram")


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
