import logging
from math import inf

logger = logging.getLogger('fnfast')

# tolerances for the approximate comparison of vector components
delta_vector = 1.e-10      # relative precision
epsilon_vector = 1.e-10    # absolute accuracy

# below this squared magnitude the kernel functions are set to zero
eps_IR = 1.e-12

# default seed of the adaptive Monte Carlo integration
seed_default = 37


class Common(object):
    """
    A class to share the integration settings among the correlators

    Attributes
    ----------
    qmax : float
        Hard cutoff on the loop momenta magnitude in the diagrams (default inf)
    UVcutoff : float
        Radius of the sphere in which the loop momenta are sampled (default 10)
    seed : int
        Seed of the random number generator of a single integration run (default 37)
    epsrel : float
        Target relative precision of the integration (default 1e-4)
    neval : int
        Number of integrand evaluations per iteration (default 10000)
    nitn : int
        Number of iterations entering the final estimate (default 10)
    nadapt : int
        Number of iterations used only to train the importance-sampling grid (default 5)
    """

    def __init__(self, qmax=inf, UVcutoff=10., seed=seed_default, epsrel=1.e-4, neval=10000, nitn=10, nadapt=5):
        self.qmax = qmax
        self.UVcutoff = UVcutoff
        self.seed = seed
        self.epsrel = epsrel
        self.neval = neval
        self.nitn = nitn
        self.nadapt = nadapt

    def vegas_settings(self):
        return dict(epsrel=self.epsrel, neval=self.neval, nitn=self.nitn, nadapt=self.nadapt, seed=self.seed)


