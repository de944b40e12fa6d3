from math import sqrt, frexp, ldexp
import numpy as np

from fnfast.common import delta_vector, epsilon_vector


def compare(x1, x2, delta=delta_vector, epsilon=epsilon_vector):
    """
    Approximate comparison of two floats to given relative precision and absolute accuracy.

    Parameters:
        x1, x2  : floats to compare
        delta   : relative precision
        epsilon : absolute accuracy

    Returns:
        1, 0 or -1, the sign of x1 - x2, where 0 means that |x1 - x2| is below
        max(epsilon, delta * 2^e), e being the base-2 exponent of the larger of x1, x2
    """
    difference = x1 - x2
    sign = 1 if difference >= 0. else -1
    difference = abs(difference)
    if difference <= epsilon: return 0
    _, exponent = frexp(x1 if abs(x1) > abs(x2) else x2)
    if difference <= ldexp(delta, exponent): return 0
    return sign

def compare_to_zero(x, epsilon=epsilon_vector):
    """ Sign of x, 0 if |x| <= epsilon """
    if x > epsilon: return 1
    if x < -epsilon: return -1
    return 0

def compare_relative(x1, x2, delta=delta_vector):
    """ Sign of x1 - x2 compared to relative precision only """
    _, exponent = frexp(x1 if abs(x1) > abs(x2) else x2)
    return compare_to_zero(x1 - x2, ldexp(delta, exponent))


class ThreeVector(object):
    """
    A Euclidean 3-vector.

    The product of two vectors is the dot product; the product with a number is the scaling.
    Equality and ordering are approximate: components are compared with compare(),
    so vectors are not hashable.

    Attributes:
        p1, p2, p3 (float): components
    """

    __slots__ = ('p1', 'p2', 'p3')

    def __init__(self, p1=0., p2=0., p3=0.):
        self.p1 = float(p1)
        self.p2 = float(p2)
        self.p3 = float(p3)

    @classmethod
    def from_array(cls, arr):
        return cls(*np.asarray(arr, dtype=float).reshape(3))

    def to_array(self):
        return np.array([self.p1, self.p2, self.p3])

    def components(self):
        return (self.p1, self.p2, self.p3)

    def square(self):
        return self.p1 * self.p1 + self.p2 * self.p2 + self.p3 * self.p3

    def magnitude(self):
        return sqrt(self.square())

    def cross(self, other):
        return ThreeVector(self.p2 * other.p3 - self.p3 * other.p2,
                           self.p3 * other.p1 - self.p1 * other.p3,
                           self.p1 * other.p2 - self.p2 * other.p1)

    def __add__(self, other):
        return ThreeVector(self.p1 + other.p1, self.p2 + other.p2, self.p3 + other.p3)

    def __sub__(self, other):
        return ThreeVector(self.p1 - other.p1, self.p2 - other.p2, self.p3 - other.p3)

    def __neg__(self):
        return ThreeVector(-self.p1, -self.p2, -self.p3)

    def __mul__(self, other):
        if isinstance(other, ThreeVector):
            return self.p1 * other.p1 + self.p2 * other.p2 + self.p3 * other.p3
        return ThreeVector(other * self.p1, other * self.p2, other * self.p3)

    def __rmul__(self, other):
        return ThreeVector(other * self.p1, other * self.p2, other * self.p3)

    def __truediv__(self, other):
        return ThreeVector(self.p1 / other, self.p2 / other, self.p3 / other)

    def __eq__(self, other):
        if not isinstance(other, ThreeVector): return NotImplemented
        return compare(self.p1, other.p1) == 0 and compare(self.p2, other.p2) == 0 and compare(self.p3, other.p3) == 0

    def __ne__(self, other):
        is_equal = self.__eq__(other)
        if is_equal is NotImplemented: return is_equal
        return not is_equal

    __hash__ = None

    def __lt__(self, other):
        # order by magnitude first, then component by component
        for a, b in ((self.square(), other.square()), (self.p1, other.p1), (self.p2, other.p2), (self.p3, other.p3)):
            comp = compare(a, b)
            if comp != 0: return comp == -1
        return False

    def __gt__(self, other):
        return other.__lt__(self)

    def __le__(self, other):
        return not other.__lt__(self)

    def __ge__(self, other):
        return not self.__lt__(other)

    def __iter__(self):
        return iter((self.p1, self.p2, self.p3))

    def __repr__(self):
        return "ThreeVector(%g, %g, %g)" % (self.p1, self.p2, self.p3)
