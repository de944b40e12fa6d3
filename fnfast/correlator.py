from math import inf

from fnfast.common import Common
from fnfast.config import Option, read_config, translate_catalog_to_dict, typename
from fnfast.labels import LabelMap, Momentum, Order, Vertex
from fnfast.kernels import SPTkernels, EFTkernels, EFTcoefficients
from fnfast.diagramset import DiagramSet2pointSPT, DiagramSet2pointEFT, DiagramSet3pointSPT, DiagramSet3pointEFT, DiagramSet4pointSPT, DiagramSet4pointEFT
from fnfast.integration import VEGASintegrator
from fnfast.phasespace import loop_momentum, angle, powerspectrum_momenta, bispectrum_momenta, trispectrum_momenta, covariance_momenta


class Correlator(object):
    """A class binding a catalog of diagrams to the external momenta of a correlator.

    The tree diagrams are evaluated at the given momenta; the loop diagrams are either evaluated at a given
    loop momentum, or integrated over it with VEGAS, the loop momentum being sampled in a sphere of radius
    'UVcutoff'. The integrals are returned as IntegralResult(result, error, prob).

    Attributes:
        c_catalog (dict): Catalog of configuration options.
        c (dict): Current configuration parameters.
        co (Common): Integration settings.
        order (Order): Highest perturbative order of the diagrams.
        PL (LinearPowerSpectrumBase): Default linear power spectrum.
        diagrams (DiagramSetBase): SPT diagrams.
        diagramsEFT (DiagramSetBase): EFT counterterm diagrams.
        SPT (SPTkernels): SPT kernels.
        EFT (EFTkernels): EFT kernels.
        eft_coefficients (EFTcoefficients): Coefficients of the EFT kernels.

    Methods:
        info(): Display the available configuration options.
        set(): Set configuration parameters.
        kernels_SPT(): SPT kernels at every vertex.
        kernels_EFT(): EFT kernels at v1, SPT kernels elsewhere.
    """

    DiagramSetSPT = None
    DiagramSetEFT = None
    npoint = None

    def __init__(self, order=Order.kOneLoop, PL=None, config=None):

        self.c_catalog = {
            "qmax": Option("qmax", (float, int),
                description="Cutoff on the magnitude of the loop momenta in the diagrams. Can only be set before the first evaluation.",
                default=inf) ,
            "UVcutoff": Option("UVcutoff", (float, int),
                description="Radius of the sphere in which the loop momenta are sampled.",
                default=10.) ,
            "seed": Option("seed", int,
                description="Seed of the random number generator of each integration.",
                default=37) ,
            "epsrel": Option("epsrel", float,
                description="Target relative error of the integration.",
                default=1.e-4) ,
            "neval": Option("neval", int,
                description="Number of integrand evaluations per iteration.",
                default=10000) ,
            "nitn": Option("nitn", int,
                description="Number of iterations entering the estimate of the integral.",
                default=10) ,
            "nadapt": Option("nadapt", int,
                description="Number of iterations training the importance-sampling grid before the estimate.",
                default=5) ,
            "eft_coefficients": Option("eft_coefficients", dict,
                description="EFT coefficients in dictionary, among {'cs', 'ch', 'c1', ..., 'c6', 'ch1', 'ch2', 'ch3', 'd1', 'd2', 'd3'}. Unspecified ones are 0.",
                default=None) ,
        }

        self.order = Order.parse(order)
        self.PL = PL

        self.diagrams = self.DiagramSetSPT(self.order)
        self.diagramsEFT = self.DiagramSetEFT(Order.kOneLoop if self.order == Order.kTwoLoop else Order.kTree)

        self.SPT = SPTkernels()
        self.eft_coefficients = EFTcoefficients()
        self.EFT = EFTkernels(self.eft_coefficients)

        self._qmax = inf
        self.set(config if config is not None else {})

    def info(self, description=True):
        """Display the available configuration options.

        Parameters
        ----------
        description : bool, optional
            Whether to include option descriptions and defaults, by default True
        """
        print ("\n")
        print ("Configuration commands [.set(config)]")
        print ("----------------------")
        for (name, config) in zip(self.c_catalog, self.c_catalog.values()):
            if config.list is None: print("\'%s\': %s" % (name, typename(config.type)))
            else: print("\'%s\': %s ; options: %s" % (name, typename(config.type), config.list))
            if description:
                print ('    - %s' % config.description)
                print ('    * default: %s' % config.default)

    def set(self, config):
        """Set configuration parameters.

        Parameters
        ----------
        config : dict or str
            Configuration parameters, as a dictionary or a YAML mapping

        Notes
        -----
        A new cutoff 'qmax' is propagated to every loop diagram, which is only allowed before the first evaluation.
        A new dictionary of 'eft_coefficients' replaces all the coefficients, the unspecified ones being set to 0.
        A refused configuration leaves the previous one in place.
        """
        previous = translate_catalog_to_dict(self.c_catalog)
        try:
            c = read_config(config, self.c_catalog)
            if c["qmax"] != self._qmax and (self.diagrams.is_evaluated() or self.diagramsEFT.is_evaluated()):
                raise RuntimeError("qmax can only be changed before the first evaluation of the loop diagrams (%s requested, %s in use)." % (c["qmax"], self._qmax))
            if c["eft_coefficients"] is not None and c["eft_coefficients"] is not previous["eft_coefficients"]:
                self.eft_coefficients.set_coefficients(dict(dict.fromkeys(EFTcoefficients.labels, 0.), **c["eft_coefficients"]))
        except Exception:
            for name, value in previous.items(): self.c_catalog[name].value = value
            raise
        self.c = c

        self.co = Common(qmax=self.c["qmax"], UVcutoff=float(self.c["UVcutoff"]), seed=self.c["seed"],
                         epsrel=self.c["epsrel"], neval=self.c["neval"], nitn=self.c["nitn"], nadapt=self.c["nadapt"])

        if self.c["qmax"] != self._qmax:
            self.diagrams.set_qmax(self.c["qmax"])
            self.diagramsEFT.set_qmax(self.c["qmax"])
            self._qmax = self.c["qmax"]

    def __getitem__(self, graph):
        if graph in self.diagramsEFT: return self.diagramsEFT[graph]
        return self.diagrams[graph]

    def vertices(self):
        return [Vertex(i) for i in range(1, self.npoint + 1)]

    def kernels_SPT(self):
        return LabelMap({vertex: self.SPT for vertex in self.vertices()})

    def kernels_EFT(self):
        kernels = self.kernels_SPT()
        kernels[Vertex.v1] = self.EFT
        return kernels

    def _kernels(self, kernels, EFT=False):
        if kernels is not None: return kernels
        if EFT: return self.kernels_EFT()
        return self.kernels_SPT()

    def _PL(self, PL):
        if PL is not None: return PL
        if self.PL is None: raise Exception("Please provide a linear power spectrum, either at construction or as PL.")
        return self.PL

    def _check_order(self, order):
        if self.order < order:
            raise Exception("%s was set up at order %s: %s diagrams are not available." % (self.__class__.__name__, self.order.name, order.name))

    def _integrate(self, ndim, integrand):
        integrator = VEGASintegrator(ndim, **self.co.vegas_settings())
        return integrator.integrate(integrand)

    def _oneLoop(self, momenta, kernels, PL):
        self._check_order(Order.kOneLoop)
        kernels, PL = self._kernels(kernels), self._PL(PL)

        def integrand(x):
            jacobian, q = loop_momentum(x[0], x[1], x[2], self.co.UVcutoff)
            if jacobian <= 0.: return 0.
            mom = momenta.copy()
            mom[Momentum.q] = q
            return jacobian * self.diagrams.value_oneLoop(mom, kernels, PL)

        return self._integrate(3, integrand)


class PowerSpectrum(Correlator):
    """ Power spectrum P(k), up to two loops """

    DiagramSetSPT = DiagramSet2pointSPT
    DiagramSetEFT = DiagramSet2pointEFT
    npoint = 2

    def tree(self, k, kernels=None, PL=None):
        return self.diagrams.value_tree(powerspectrum_momenta(k), self._kernels(kernels), self._PL(PL))

    def oneLoop_point(self, k, q, kernels=None, PL=None):
        self._check_order(Order.kOneLoop)
        mom = powerspectrum_momenta(k)
        mom[Momentum.q] = q
        return self.diagrams.value_oneLoop(mom, self._kernels(kernels), self._PL(PL))

    def oneLoop(self, k, kernels=None, PL=None):
        return self._oneLoop(powerspectrum_momenta(k), kernels, PL)

    def twoLoop_point(self, k, q, q2, kernels=None, PL=None):
        self._check_order(Order.kTwoLoop)
        mom = powerspectrum_momenta(k)
        mom[Momentum.q], mom[Momentum.q2] = q, q2
        return self.diagrams.value_twoLoop(mom, self._kernels(kernels), self._PL(PL))

    def twoLoop(self, k, kernels=None, PL=None):
        self._check_order(Order.kTwoLoop)
        kernels, PL = self._kernels(kernels), self._PL(PL)
        momenta = powerspectrum_momenta(k)

        def integrand(x):
            jacobian, q = loop_momentum(x[0], x[1], x[2], self.co.UVcutoff)
            jacobian2, q2 = loop_momentum(x[3], x[4], x[5], self.co.UVcutoff)
            if jacobian * jacobian2 <= 0.: return 0.
            mom = momenta.copy()
            mom[Momentum.q], mom[Momentum.q2] = q, q2
            return jacobian * jacobian2 * self.diagrams.value_twoLoop(mom, kernels, PL)

        return self._integrate(6, integrand)

    def treeEFT(self, k, kernels=None, PL=None):
        return self.diagramsEFT.value_tree(powerspectrum_momenta(k), self._kernels(kernels, EFT=True), self._PL(PL))


class Bispectrum(Correlator):
    """ Bispectrum B(k1, k2, theta12), with theta12 the angle between k1 and k2, up to one loop """

    DiagramSetSPT = DiagramSet3pointSPT
    DiagramSetEFT = DiagramSet3pointEFT
    npoint = 3

    def tree(self, k1, k2, theta12, kernels=None, PL=None):
        return self.diagrams.value_tree(bispectrum_momenta(k1, k2, theta12), self._kernels(kernels), self._PL(PL))

    def oneLoop_point(self, k1, k2, theta12, q, kernels=None, PL=None):
        self._check_order(Order.kOneLoop)
        mom = bispectrum_momenta(k1, k2, theta12)
        mom[Momentum.q] = q
        return self.diagrams.value_oneLoop(mom, self._kernels(kernels), self._PL(PL))

    def oneLoop(self, k1, k2, theta12, kernels=None, PL=None):
        return self._oneLoop(bispectrum_momenta(k1, k2, theta12), kernels, PL)

    def treeEFT(self, k1, k2, theta12, kernels=None, PL=None):
        return self.diagramsEFT.value_tree(bispectrum_momenta(k1, k2, theta12), self._kernels(kernels, EFT=True), self._PL(PL))


class Trispectrum(Correlator):
    """ Trispectrum T(k1, k2, k3, k4) of 3-vectors, k4 = -k1-k2-k3 unless given, up to one loop """

    DiagramSetSPT = DiagramSet4pointSPT
    DiagramSetEFT = DiagramSet4pointEFT
    npoint = 4

    def tree(self, k1, k2, k3, k4=None, kernels=None, PL=None):
        return self.diagrams.value_tree(trispectrum_momenta(k1, k2, k3, k4), self._kernels(kernels), self._PL(PL))

    def oneLoop_point(self, k1, k2, k3, q, k4=None, kernels=None, PL=None):
        self._check_order(Order.kOneLoop)
        mom = trispectrum_momenta(k1, k2, k3, k4)
        mom[Momentum.q] = q
        return self.diagrams.value_oneLoop(mom, self._kernels(kernels), self._PL(PL))

    def oneLoop(self, k1, k2, k3, k4=None, kernels=None, PL=None):
        return self._oneLoop(trispectrum_momenta(k1, k2, k3, k4), kernels, PL)

    def treeEFT(self, k1, k2, k3, k4=None, kernels=None, PL=None):
        return self.diagramsEFT.value_tree(trispectrum_momenta(k1, k2, k3, k4), self._kernels(kernels, EFT=True), self._PL(PL))


class Covariance(Correlator):
    """
    Trispectrum contribution to the covariance of the power spectrum at k and k', T(k, -k, k', -k'),
    integrated over the angle between k and k'.
    """

    DiagramSetSPT = DiagramSet4pointSPT
    DiagramSetEFT = DiagramSet4pointEFT
    npoint = 4

    def tree_point(self, k, kprime, costheta, kernels=None, PL=None):
        return self.diagrams.value_tree(covariance_momenta(k, kprime, costheta), self._kernels(kernels), self._PL(PL))

    def tree(self, k, kprime, kernels=None, PL=None):
        kernels, PL = self._kernels(kernels), self._PL(PL)

        def integrand(x):
            jacobian, costheta = angle(x[0])
            return jacobian * self.diagrams.value_tree(covariance_momenta(k, kprime, costheta), kernels, PL)

        return self._integrate(1, integrand)

    def oneLoop_point(self, k, kprime, costheta, q, kernels=None, PL=None):
        self._check_order(Order.kOneLoop)
        mom = covariance_momenta(k, kprime, costheta)
        mom[Momentum.q] = q
        return self.diagrams.value_oneLoop(mom, self._kernels(kernels), self._PL(PL))

    def oneLoop(self, k, kprime, kernels=None, PL=None):
        self._check_order(Order.kOneLoop)
        kernels, PL = self._kernels(kernels), self._PL(PL)

        def integrand(x):
            jacobian, q = loop_momentum(x[0], x[1], x[2], self.co.UVcutoff)
            jacobian_angle, costheta = angle(x[3])
            jacobian *= jacobian_angle
            if jacobian <= 0.: return 0.
            mom = covariance_momenta(k, kprime, costheta)
            mom[Momentum.q] = q
            return jacobian * self.diagrams.value_oneLoop(mom, kernels, PL)

        return self._integrate(4, integrand)

    def treeEFT(self, k, kprime, kernels=None, PL=None):
        kernels, PL = self._kernels(kernels, EFT=True), self._PL(PL)

        def integrand(x):
            jacobian, costheta = angle(x[0])
            return jacobian * self.diagramsEFT.value_tree(covariance_momenta(k, kprime, costheta), kernels, PL)

        return self._integrate(1, integrand)
