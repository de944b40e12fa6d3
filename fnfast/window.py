from math import sin


class WindowFunctionBase(object):
    """ Survey window function in Fourier space, a function of a 3-vector """

    def __call__(self, x):
        raise NotImplementedError


class WindowFunctionTopHat(WindowFunctionBase):
    """
    Fourier transform of a cubic box of side L: W(x) = 1 inside the box, 0 outside in real space.
    W(k) = V prod_i sin(k_i L/2) / (k_i L/2), with V = L^3.
    """

    def __init__(self, L):
        self.L = L
        self.V = L * L * L

    def _Wi(self, xi):
        if xi == 0: return 1.
        return sin(xi * self.L / 2.) / (xi * self.L / 2.)

    def __call__(self, x):
        return self.V * self._Wi(x.p1) * self._Wi(x.p2) * self._Wi(x.p3)
