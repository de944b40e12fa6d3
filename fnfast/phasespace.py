"""
Maps from the unit hypercube to the loop momenta, and the external momentum configurations of the correlators.

The loop momentum is sampled in spherical coordinates in a sphere of radius qmax,
|q| = x0 qmax, cos(theta) = 2 x1 - 1, phi = 2 pi x2, with the jacobian q^2 qmax / (2 pi^2)
of the volume element d^3q / (2 pi)^3 of the loop integral.
"""

from math import cos, sin, sqrt, pi

from fnfast.labels import LabelMap, Momentum
from fnfast.threevector import ThreeVector


def loop_momentum(x0, x1, x2, qmax):
    """ (jacobian, q) at the point (x0, x1, x2) of the unit cube """
    qmag = x0 * qmax
    costheta = 2. * x1 - 1.
    sintheta = sqrt(max(0., 1. - costheta**2))
    phi = 2. * pi * x2
    q = ThreeVector(qmag * sintheta * cos(phi), qmag * sintheta * sin(phi), qmag * costheta)
    jacobian = qmag**2 * qmax / (2. * pi**2)
    return jacobian, q


def angle(x):
    """ (jacobian, cos(theta)) for cos(theta) = 2 x - 1 """
    return 2., 2. * x - 1.


def powerspectrum_momenta(k):
    k1 = ThreeVector(0., 0., k)
    return LabelMap({Momentum.k1: k1, Momentum.k2: -k1})


def bispectrum_momenta(k1, k2, theta12):
    """ k1 along z, k2 at an angle theta12 from k1 in the xz plane, k3 = -k1-k2 """
    p1 = ThreeVector(0., 0., k1)
    p2 = ThreeVector(k2 * sin(theta12), 0., k2 * cos(theta12))
    return LabelMap({Momentum.k1: p1, Momentum.k2: p2, Momentum.k3: -p1 - p2})


def trispectrum_momenta(k1, k2, k3, k4=None):
    if k4 is None: k4 = -k1 - k2 - k3
    return LabelMap({Momentum.k1: k1, Momentum.k2: k2, Momentum.k3: k3, Momentum.k4: k4})


def covariance_momenta(k, kprime, costheta):
    """ Trispectrum configuration (k, -k, k', -k') with k' at an angle arccos(costheta) from k """
    sintheta = sqrt(max(0., 1. - costheta**2))
    p1 = ThreeVector(0., 0., k)
    p3 = ThreeVector(kprime * sintheta, 0., kprime * costheta)
    return LabelMap({Momentum.k1: p1, Momentum.k2: -p1, Momentum.k3: p3, Momentum.k4: -p3})
