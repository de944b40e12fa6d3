from itertools import permutations

from fnfast.common import logger, eps_IR
from fnfast.threevector import ThreeVector


def momentum_sum(p):
    ptot = ThreeVector()
    for pi in p: ptot = ptot + pi
    return ptot


class KernelBase(object):
    """
    Vertex factors of the perturbative expansion.

    Methods:
        Fn(p): Density kernel of the ordered list of momenta p.
        Gn(p): Velocity divergence kernel of the ordered list of momenta p.
        Fn_sym(p): Fn averaged over all orderings of p.
        Gn_sym(p): Gn averaged over all orderings of p.
    """

    def Fn(self, p):
        raise NotImplementedError

    def Gn(self, p):
        raise NotImplementedError

    def Fn_sym(self, p):
        orderings = list(permutations(p))
        return sum(self.Fn(list(ordering)) for ordering in orderings) / len(orderings)

    def Gn_sym(self, p):
        orderings = list(permutations(p))
        return sum(self.Gn(list(ordering)) for ordering in orderings) / len(orderings)


class SPTkernels(KernelBase):
    """
    Standard perturbation theory kernels, from the recursion relations

        Fn(p) = sum_{k=1}^{n-1} G_k(p_1..p_k) [cF_alpha(n) alpha(P_k, P_n-k) F_n-k(p_k+1..p_n) + cF_beta(n) beta(P_k, P_n-k) G_n-k(p_k+1..p_n)]

    and likewise for Gn with cG_alpha, cG_beta; P_k, P_n-k are the sums of the two subsets of momenta.
    The kernels of the sub-lists are memoized for the duration of a call, which the symmetrized
    kernels share across all orderings.
    """

    @staticmethod
    def cF_alpha(n):
        return (2 * n + 1.) / ((n - 1) * (2 * n + 3))

    @staticmethod
    def cF_beta(n):
        return 2. / ((n - 1) * (2 * n + 3))

    @staticmethod
    def cG_alpha(n):
        return 3. / ((n - 1) * (2 * n + 3))

    @staticmethod
    def cG_beta(n):
        return (2. * n) / ((n - 1) * (2 * n + 3))

    @staticmethod
    def alpha(p1, p2):
        if p1 * p1 < eps_IR: return 0.
        return ((p1 + p2) * p1) / (p1 * p1)

    @staticmethod
    def beta(p1, p2):
        if p1 * p1 < eps_IR or p2 * p2 < eps_IR: return 0.
        return ((p1 + p2) * (p1 + p2)) * (p1 * p2) / (2 * (p1 * p1) * (p2 * p2))

    def _FGn(self, idx, p, cache):
        """ (Fn, Gn) of the momenta p[i] for i in the ordered tuple idx """
        if idx in cache: return cache[idx]
        n = len(idx)
        if n == 0: res = (0., 0.)
        elif n == 1: res = (1., 1.)
        else:
            Fnval, Gnval = 0., 0.
            for k in range(1, n):
                pktot = momentum_sum(p[i] for i in idx[:k])
                pnktot = momentum_sum(p[i] for i in idx[k:])
                a, b = self.alpha(pktot, pnktot), self.beta(pktot, pnktot)
                Gk = self._FGn(idx[:k], p, cache)[1]
                Fnk, Gnk = self._FGn(idx[k:], p, cache)
                Fnval += Gk * (self.cF_alpha(n) * a * Fnk + self.cF_beta(n) * b * Gnk)
                Gnval += Gk * (self.cG_alpha(n) * a * Fnk + self.cG_beta(n) * b * Gnk)
            res = (Fnval, Gnval)
        cache[idx] = res
        return res

    def Fn(self, p):
        return self._FGn(tuple(range(len(p))), list(p), {})[0]

    def Gn(self, p):
        return self._FGn(tuple(range(len(p))), list(p), {})[1]

    def Fn_sym(self, p):
        p, cache = list(p), {}
        orderings = list(permutations(range(len(p))))
        return sum(self._FGn(idx, p, cache)[0] for idx in orderings) / len(orderings)

    def Gn_sym(self, p):
        p, cache = list(p), {}
        orderings = list(permutations(range(len(p))))
        return sum(self._FGn(idx, p, cache)[1] for idx in orderings) / len(orderings)


class EFTcoefficients(object):
    """
    Coefficients of the EFT counterterms, all initialized to zero.

    LO:   cs, ch
    NLO:  c1, c2, c3, c4, c5, c6, ch1, ch2, ch3
    NNLO: d1, d2, d3
    """

    labels = ['cs', 'ch', 'c1', 'c2', 'c3', 'c4', 'c5', 'c6', 'ch1', 'ch2', 'ch3', 'd1', 'd2', 'd3']

    descriptions = {
        'cs': "k^2 x delta in Euler equation (speed of sound)",
        'ch': "k^2 x delta in continuity equation (heat capacity)",
        'c1': "k^2 x delta^2 in Euler equation (k=k1+k2)",
        'c2': "k^2(-1/3+(k1.k2)^2/(k1^2k2^2)) x delta^2 in Euler equation (k=k1+k2)",
        'c3': "-k^2/6+(k1.k2)/2(k.k1/k1^2) x delta^2 + perms in Euler equation (k=k1+k2)",
        'c4': "k^2 x delta x theta in Euler equation (k=k1+k2)",
        'c5': "k^2(-1/3+(k1.k2)^2/(k1^2k2^2)) x delta x theta in Euler equation (k=k1+k2)",
        'c6': "-k^2/6+(k1.k2)/2(k.k1/k1^2) x delta x theta + perms in Euler equation (k=k1+k2)",
        'ch1': "k^2 x delta^2 in continuity equation (k=k1+k2)",
        'ch2': "k^2(-1/3+(k1.k2)^2/(k1^2k2^2)) x delta^2 in continuity equation (k=k1+k2)",
        'ch3': "-k^2/6+(k1.k2)/2(k.k1/k1^2) x delta^2 + perms in continuity equation (k=k1+k2)",
        'd1': "(k.k1)^2(k2.k3)^2/(k1^2k2^2k3^2) x delta^3 + perms in Euler equation (k=k1+k2+k3)",
        'd2': "(k.k1)(k.k2)(k1.k3)(k2.k3)/(k1^2k2^2k3^2) x delta^3 + perms in Euler equation (k=k1+k2+k3)",
        'd3': "(k.k1)^2/k1^2 x delta^3 + perms in Euler equation (k=k1+k2+k3)",
    }

    def __init__(self, coefficients=None):
        self._values = dict.fromkeys(self.labels, 0.)
        if coefficients: self.set_coefficients(coefficients)

    def __getitem__(self, label):
        self._check_label(label)
        return self._values[label]

    def __setitem__(self, label, value):
        self._check_label(label)
        self._values[label] = float(value)

    def _check_label(self, label):
        if label not in self._values:
            raise Exception("%s is not an EFT coefficient. Choose among %s." % (label, self.labels))

    def set_coefficients(self, coefficients):
        for label in coefficients: self._check_label(label)
        for label, value in coefficients.items(): self[label] = value

    def as_dict(self):
        return dict(self._values)

    def description(self, label=None):
        if label is None:
            return ("There are 14 coefficients in total. Call description(coefficient name) for details.\n"
                    "LO:   2 coefficients  -> cs,ch\n"
                    "NLO:  9 coefficients  -> c1,c2,c3,c4,c5,c6,ch1,ch2,ch3\n"
                    "NNLO: 3 coefficients  -> d1,d2,d3")
        self._check_label(label)
        return "Coefficient of " + self.descriptions[label]

    def __repr__(self):
        return "EFTcoefficients(%s)" % ", ".join("%s=%g" % (label, self._values[label]) for label in self.labels)


class EFTkernels(KernelBase):
    """
    Kernels of the EFT counterterms, linear in the EFT coefficients.

    Fn is available up to n = 3, Gn up to n = 2; beyond that a warning is logged and 0 returned.
    """

    def __init__(self, coefficients=None):
        self.coefficients = coefficients if coefficients is not None else EFTcoefficients()
        self._sptkernels = SPTkernels()

    def set_coefficients(self, coefficients):
        self.coefficients = coefficients

    @staticmethod
    def cF_1(n):
        return (2 * n + 5.) / (2 * n * n + 9 * n + 7)

    @staticmethod
    def cF_2(n):
        return -2. / (2 * n * n + 9 * n + 7)

    @staticmethod
    def cG_1(n):
        return 3. / (2 * n * n + 9 * n + 7)

    @staticmethod
    def cG_2(n):
        return (-2 * n - 4.) / (2 * n * n + 9 * n + 7)

    def alpha(self, p1, p2):
        return self._sptkernels.alpha(p1, p2)

    def beta(self, p1, p2):
        return self._sptkernels.beta(p1, p2)

    @staticmethod
    def _lo_shapes(p):
        return [p * p]

    @staticmethod
    def _nlo_shapes(p1, p2):
        p = p1 + p2
        shape1 = p * p
        if p1 * p1 < eps_IR or p2 * p2 < eps_IR: return [shape1, 0., 0.]
        shape2 = (p * p) * (-1. / 3 + (p1 * p2) * (p1 * p2) / ((p1 * p1) * (p2 * p2)))
        shape3 = -(p * p) / 6 + (p1 * p2) / 2 * (p * p1 / (p1 * p1) + p * p2 / (p2 * p2))
        return [shape1, shape2, shape3]

    @staticmethod
    def _nnlo_shapes(p1, p2, p3):
        if p1 * p1 < eps_IR or p2 * p2 < eps_IR or p3 * p3 < eps_IR: return [0., 0., 0.]
        p = p1 + p2 + p3
        norm = (p1 * p1) * (p2 * p2) * (p3 * p3)
        shape1 = ((p * p1) ** 2 * (p2 * p3) ** 2 + (p * p2) ** 2 * (p1 * p3) ** 2 + (p * p3) ** 2 * (p1 * p2) ** 2) / norm
        shape2 = ((p * p1) * (p * p2) * (p1 * p3) * (p2 * p3) + (p * p1) * (p * p3) * (p1 * p2) * (p2 * p3) + (p * p2) * (p * p3) * (p1 * p2) * (p1 * p3)) / norm
        shape3 = (p * p1) ** 2 / (p1 * p1) + (p * p2) ** 2 / (p2 * p2) + (p * p3) ** 2 / (p3 * p3)
        return [shape1, shape2, shape3]

    def _coefficients(self, *labels):
        return [self.coefficients[label] for label in labels]

    def _c_vals_2(self):
        c = self.coefficients
        return [c['c1'] - c['c4'], c['c2'] - c['c5'], c['c3'] - c['c6']]

    def Fn(self, p):
        n = len(p)
        if n == 0: return 0.
        if n > 3:
            logger.warning("There is no EFT kernel Fn available for n = %d", n)
            return 0.
        c, spt = self.coefficients, self._sptkernels
        if n == 1:
            lo = self._lo_shapes(p[0])[0]
            return self.cF_2(1) * c['cs'] * lo + self.cF_1(1) * c['ch'] * lo
        if n == 2:
            p0, p1, p01 = [p[0]], [p[1]], [p[0], p[1]]
            lo = self._lo_shapes(p[0] + p[1])[0]
            nlo = self._nlo_shapes(p[0], p[1])
            return (self.cF_1(2) * self.alpha(p[0], p[1]) * (self.Gn(p0) + self.Fn(p1))
                    - self.cF_2(2) * self.beta(p[0], p[1]) * (self.Gn(p0) + self.Gn(p1))
                    + self.cF_2(2) * c['cs'] * lo * spt.Fn(p01)
                    + self.cF_1(2) * c['ch'] * lo * spt.Fn(p01)
                    + self.cF_2(2) * _dot(self._c_vals_2(), nlo)
                    + self.cF_1(2) * _dot(self._coefficients('ch1', 'ch2', 'ch3'), nlo))
        p0, p2 = [p[0]], [p[2]]
        p01, p12, p012 = [p[0], p[1]], [p[1], p[2]], [p[0], p[1], p[2]]
        cdelta = self._coefficients('c1', 'c2', 'c3')
        ctheta = self._coefficients('c4', 'c5', 'c6')
        ch = self._coefficients('ch1', 'ch2', 'ch3')
        d = self._coefficients('d1', 'd2', 'd3')
        lo = self._lo_shapes(p[0] + p[1] + p[2])[0]
        nlo_0_12 = self._nlo_shapes(p[0], p[1] + p[2])
        nlo_01_2 = self._nlo_shapes(p[0] + p[1], p[2])
        return (self.cF_1(3) * self.alpha(p[0], p[1] + p[2]) * (self.Gn(p0) * spt.Fn(p12) + self.Fn(p12))
                + self.cF_1(3) * self.alpha(p[0] + p[1], p[2]) * (self.Gn(p01) + spt.Gn(p01) * self.Fn(p2))
                - self.cF_2(3) * self.beta(p[0], p[1] + p[2]) * (self.Gn(p0) * spt.Gn(p12) + self.Gn(p12))
                - self.cF_2(3) * self.beta(p[0] + p[1], p[2]) * (self.Gn(p01) + spt.Gn(p01) * self.Gn(p2))
                + self.cF_2(3) * c['cs'] * lo * spt.Fn(p012)
                + self.cF_1(3) * c['ch'] * lo * spt.Fn(p012)
                + self.cF_2(3) * _dot(cdelta, nlo_0_12) * spt.Fn(p12)
                - self.cF_2(3) * _dot(ctheta, nlo_0_12) * spt.Gn(p12)
                + self.cF_2(3) * _dot(cdelta, nlo_01_2) * spt.Fn(p01)
                - self.cF_2(3) * _dot(ctheta, nlo_01_2) * spt.Fn(p01)
                + self.cF_1(3) * _dot(ch, nlo_0_12) * spt.Fn(p12)
                + self.cF_1(3) * _dot(ch, nlo_01_2) * spt.Fn(p01)
                + self.cF_2(3) * _dot(d, self._nnlo_shapes(p[0], p[1], p[2])))

    def Gn(self, p):
        n = len(p)
        if n == 0: return 0.
        if n > 2:
            logger.warning("There is no EFT kernel Gn available for n = %d", n)
            return 0.
        c, spt = self.coefficients, self._sptkernels
        if n == 1:
            lo = self._lo_shapes(p[0])[0]
            return self.cG_2(1) * c['cs'] * lo + self.cG_1(1) * c['ch'] * lo
        p0, p1, p01 = [p[0]], [p[1]], [p[0], p[1]]
        lo = self._lo_shapes(p[0] + p[1])[0]
        nlo = self._nlo_shapes(p[0], p[1])
        return (self.cG_1(2) * self.alpha(p[0], p[1]) * (self.Gn(p0) + self.Fn(p1))
                - self.cG_2(2) * self.beta(p[0], p[1]) * (self.Gn(p0) + self.Gn(p1))
                + self.cG_2(2) * c['cs'] * lo * spt.Fn(p01)
                + self.cG_1(2) * c['ch'] * lo * spt.Fn(p01)
                + self.cG_2(2) * _dot(self._c_vals_2(), nlo)
                + self.cG_1(2) * _dot(self._coefficients('ch1', 'ch2', 'ch3'), nlo))


def _dot(a, b):
    if len(a) != len(b): raise ValueError("Received invalid argument in dot product. Size of vectors does not match")
    return sum(ai * bi for ai, bi in zip(a, b))
