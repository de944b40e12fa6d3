import numpy as np
from scipy.interpolate import interp1d


class LinearPowerSpectrumBase(object):
    """ Linear matter power spectrum, a function of the magnitude of the momentum """

    def __call__(self, k):
        raise NotImplementedError


class LinearPowerSpectrumPowerLaw(LinearPowerSpectrumBase):
    """ P(k) = amplitude * (k / kstar)^n """

    def __init__(self, n, amplitude=1., kstar=1.):
        self.n = n
        self.amplitude = amplitude
        self.kstar = kstar

    def __call__(self, k):
        with np.errstate(divide='ignore'):
            return self.amplitude * float(np.power(k / self.kstar, self.n))


class LinearPowerSpectrumTabulated(LinearPowerSpectrumBase):
    """
    Linear power spectrum interpolated from a table (e.g. the output of a Boltzmann code).

    Power laws are fitted in log-log space to the first and last ntail points, and extended by one
    decade on each side; the table and the extensions are interpolated with a cubic spline, and
    the fitted power laws are used outside of the extended range.

    Attributes:
        kk (ndarray): tabulated momenta, increasing.
        pk (ndarray): tabulated power spectrum.
        c_low, c_high (tuple): (slope, log amplitude) of the low- and high-k power laws.
    """

    def __init__(self, kk, pk, ntail=10, npatch=10):
        kk, pk = np.asarray(kk, dtype=float), np.asarray(pk, dtype=float)
        if kk.ndim != 1 or kk.shape != pk.shape:
            raise Exception("Please provide 'kk' and 'pk' as 1d arrays of the same length.")
        if kk.size < ntail + 2:
            raise Exception("Please provide at least %d points to fit the power-law tails." % (ntail + 2))
        if np.any(kk <= 0) or np.any(pk <= 0):
            raise Exception("Please provide strictly positive 'kk' and 'pk': the tails are fitted in log-log space.")
        if np.any(np.diff(kk) <= 0):
            raise Exception("Please provide 'kk' in increasing order.")
        self.kk, self.pk = kk, pk

        self.c_low = np.polyfit(np.log(kk[:ntail]), np.log(pk[:ntail]), 1)
        self.c_high = np.polyfit(np.log(kk[-ntail:]), np.log(pk[-ntail:]), 1)

        k_low_patch = np.geomspace(kk[0] / 10., kk[0], npatch + 2)
        k_high_patch = np.geomspace(kk[-1], kk[-1] * 10., npatch + 2)
        self.kk_patches = np.concatenate([k_low_patch, kk[1:-1], k_high_patch])
        self.pk_patches = np.concatenate([self._tail(k_low_patch, self.c_low), pk[1:-1], self._tail(k_high_patch, self.c_high)])

        self._spline = interp1d(self.kk_patches, self.pk_patches, kind='cubic')

    @staticmethod
    def _tail(k, c):
        return np.exp(c[1]) * k ** c[0]

    def __call__(self, k):
        if k < 0: return 0.
        if k < self.kk_patches[0]: return float(self._tail(k, self.c_low))
        if k < self.kk_patches[-1]: return float(self._spline(k))
        return float(self._tail(k, self.c_high))
