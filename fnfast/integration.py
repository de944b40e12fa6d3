from collections import namedtuple

import numpy as np
import vegas

from fnfast.common import logger, seed_default

IntegralResult = namedtuple('IntegralResult', ['result', 'error', 'prob'])
IntegralResult.__doc__ = """ Estimate of an integral, its error, and the probability that the iterations are inconsistent """


class VEGASintegrator(object):
    """
    Adaptive Monte Carlo integration over the unit hypercube.

    The integrand takes a point x of the hypercube (an array of length ndim) and returns a scalar.
    The importance-sampling grid is first trained for nadapt iterations whose results are discarded,
    then nitn iterations of neval evaluations enter the estimate, stopping early once the relative
    error falls below epsrel. Each integration draws its random numbers from its own generator seeded
    with seed, so that repeating it returns the same result.

    Attributes:
        ndim (int): dimension of the hypercube.
        epsrel (float): target relative error.
        neval (int): evaluations per iteration.
        nitn (int): iterations entering the estimate.
        nadapt (int): iterations training the grid.
        seed (int): random number generator seed.

    Methods:
        integrate(integrand): IntegralResult of the integrand.
    """

    def __init__(self, ndim, epsrel=1.e-4, neval=10000, nitn=10, nadapt=5, seed=seed_default):
        if ndim < 1: raise Exception("The integration needs at least one dimension, got %s." % ndim)
        self.ndim = ndim
        self.epsrel = epsrel
        self.neval = neval
        self.nitn = nitn
        self.nadapt = nadapt
        self.seed = seed

    def _batch(self, integrand):
        @vegas.batchintegrand
        def f(xs):
            return np.array([integrand(x) for x in xs], dtype=float)
        return f

    def integrate(self, integrand):
        rng = np.random.default_rng(self.seed)
        integrator = vegas.Integrator(self.ndim * [[0., 1.]], ran_array_generator=rng.random)
        f = self._batch(integrand)

        logger.debug("integrating in %d dimensions, %d x %d evaluations after %d training iterations" % (self.ndim, self.nitn, self.neval, self.nadapt))
        if self.nadapt > 0: integrator(f, nitn=self.nadapt, neval=self.neval)
        result = integrator(f, nitn=self.nitn, neval=self.neval, rtol=self.epsrel)

        prob = 0. if np.isnan(result.Q) else 1. - result.Q
        integral = IntegralResult(float(result.mean), float(result.sdev), float(prob))
        logger.info("result: %.6e, error: %.2e, prob: %.3f" % integral)
        return integral
