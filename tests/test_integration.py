#!/usr/bin/env python3
"""
Test script for the fnfast VEGAS integrator and phase-space maps.
"""

import numpy as np
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from test_utils import TestHelpers, run_tests

from fnfast.diagramset import DiagramSet2pointSPT
from fnfast.integration import IntegralResult, VEGASintegrator
from fnfast.labels import Momentum, Order
from fnfast.linear import LinearPowerSpectrumPowerLaw
from fnfast.phasespace import loop_momentum, angle, powerspectrum_momenta, bispectrum_momenta, trispectrum_momenta, covariance_momenta
from fnfast.threevector import ThreeVector


def test_vegas_polynomial():
    """Test VEGAS on integrals known in closed form."""
    integrator = VEGASintegrator(1, epsrel=1e-3, neval=1000, nitn=5, nadapt=2, seed=1)
    res = integrator.integrate(lambda x: 3 * x[0]**2)
    assert isinstance(res, IntegralResult)
    assert abs(res.result - 1.) < 1e-2
    assert res.error > 0.
    assert 0. <= res.prob <= 1.

    integrator = VEGASintegrator(3, epsrel=1e-3, neval=2000, nitn=5, nadapt=2, seed=2)
    res = integrator.integrate(lambda x: x[0] * x[1] * x[2])
    assert abs(res.result - 0.125) < 5 * res.error + 1e-3
    print("✓ VEGAS integrals correct")


def test_vegas_reproducible():
    """Test that an integration with a given seed is reproducible."""
    def f(x):
        return np.exp(-10 * ((x[0] - 0.3)**2 + (x[1] - 0.6)**2))

    first = VEGASintegrator(2, neval=500, nitn=3, nadapt=1, seed=11).integrate(f)
    second = VEGASintegrator(2, neval=500, nitn=3, nadapt=1, seed=11).integrate(f)
    assert first == second
    try:
        VEGASintegrator(0)
        raise RuntimeError("Zero-dimensional integration should be refused")
    except RuntimeError:
        raise
    except Exception as e:
        assert 'dimension' in str(e)
    print("✓ VEGAS reproducible with a fixed seed")


def test_loop_momentum():
    """Test the map from the unit cube to the loop momentum."""
    qmax = 2.
    jacobian, q = loop_momentum(0.5, 1., 0., qmax)
    assert q == ThreeVector(0, 0, 1.)
    assert TestHelpers.isclose(jacobian, 1. * qmax / (2 * np.pi**2))

    jacobian, q = loop_momentum(0.25, 0.5, 0.25, qmax)
    assert q == ThreeVector(0, 0.5, 0)

    jacobian, q = loop_momentum(0., 0.3, 0.7, qmax)
    assert jacobian == 0. and q == ThreeVector()

    # the jacobian integrates to the volume of the sphere over (2 pi)^3
    rng = np.random.default_rng(5)
    x = rng.random((20000, 3))
    volume = np.mean([loop_momentum(*xi, qmax)[0] for xi in x])
    assert abs(volume - 4. / 3. * np.pi * qmax**3 / (2 * np.pi)**3) < 0.03 * volume
    assert angle(0.75) == (2., 0.5)
    print("✓ Loop momentum sampled")


def test_loop_integral_reference():
    """Test a sampled one-loop integral against a quadrature of d^3q / (2 pi)^3."""
    PL, kernels = LinearPowerSpectrumPowerLaw(1.), TestHelpers.kernels_SPT(2)
    P22 = DiagramSet2pointSPT(Order.kOneLoop)['P22']
    k, UVcutoff = 0.3, 1.
    mom = powerspectrum_momenta(k)

    def value_at(q):
        m = mom.copy()
        m[Momentum.q] = q
        return P22.value(m, kernels, PL)

    def integrand(x):
        jacobian, q = loop_momentum(x[0], x[1], x[2], UVcutoff)
        if jacobian <= 0.: return 0.
        return jacobian * value_at(q)

    sampled = VEGASintegrator(3, epsrel=1e-3, neval=2000, nitn=5, nadapt=2, seed=3).integrate(integrand)

    # the poles of P22 lie on the k axis: d^3q / (2 pi)^3 -> q^2 dq dmu / (4 pi^2), midpoint rule in (q, mu)
    n = 80
    reference = 0.
    for qi in (np.arange(n) + 0.5) * UVcutoff / n:
        for mu in (np.arange(n) + 0.5) * 2. / n - 1.:
            reference += qi**2 * value_at(ThreeVector(qi * np.sqrt(1. - mu**2), 0., qi * mu))
    reference *= (UVcutoff / n) * (2. / n) / (4 * np.pi**2)

    assert reference > 0.
    assert abs(sampled.result - reference) < 0.02 * reference + 3 * sampled.error, (sampled, reference)
    print("✓ Sampled loop integral matches the quadrature")


def test_external_momenta():
    """Test the external momentum configurations."""
    mom = powerspectrum_momenta(0.3)
    assert mom[Momentum.k1] == ThreeVector(0, 0, 0.3) and mom[Momentum.k2] == ThreeVector(0, 0, -0.3)

    mom = bispectrum_momenta(1., 2., np.pi / 2)
    assert mom[Momentum.k2] == ThreeVector(2., 0, 0)
    assert mom[Momentum.k1] + mom[Momentum.k2] + mom[Momentum.k3] == ThreeVector()

    k1, k2, k3 = ThreeVector(1, 0, 0), ThreeVector(0, 1, 0), ThreeVector(0, 0, 1)
    mom = trispectrum_momenta(k1, k2, k3)
    assert mom[Momentum.k4] == ThreeVector(-1, -1, -1)
    mom = trispectrum_momenta(k1, k2, k3, ThreeVector(0.5, 0, 0))
    assert mom[Momentum.k4] == ThreeVector(0.5, 0, 0)

    mom = covariance_momenta(1., 2., 0.)
    assert mom[Momentum.k3] == ThreeVector(2., 0, 0) and mom[Momentum.k4] == ThreeVector(-2., 0, 0)
    assert mom[Momentum.k1] * mom[Momentum.k3] == 0.
    mom = covariance_momenta(1., 2., 1.)
    assert mom[Momentum.k3] == ThreeVector(0, 0, 2.)
    print("✓ External momenta configured")


def main():
    """Run all integration tests."""
    tests = [
        ("VEGAS polynomial", test_vegas_polynomial),
        ("VEGAS reproducible", test_vegas_reproducible),
        ("Loop momentum", test_loop_momentum),
        ("Loop integral reference", test_loop_integral_reference),
        ("External momenta", test_external_momenta),
    ]
    return run_tests(tests, "integration")


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
