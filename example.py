import logging

import numpy as np

from fnfast.correlator import PowerSpectrum, Bispectrum, Covariance
from fnfast.linear import LinearPowerSpectrumTabulated

logging.basicConfig(level=logging.INFO)

### Linear power spectrum from a Boltzmann code table
kin, Plin = np.loadtxt('output/test/class_pk.dat', unpack = True)
PL = LinearPowerSpectrumTabulated(kin, Plin)

### One-loop power spectrum, integrated with VEGAS
ps = PowerSpectrum('oneLoop', PL, config={'UVcutoff': 10., 'neval': 20000, 'seed': 1})
ps.info()
for k in [0.05, 0.1, 0.2]:
    res = ps.oneLoop(k)
    print(k, ps.tree(k), res.result, res.error)

### Speed of sound counterterm: 2 F1^EFT(k) P(k)
ps.set({'eft_coefficients': {'cs': 1.}})
print(ps.treeEFT(0.1))

### Tree-level bispectrum in the equilateral configuration
bs = Bispectrum('tree', PL)
print(bs.tree(0.1, 0.1, 2 * np.pi / 3))

### Angle-averaged tree-level trispectrum contribution to the covariance of P(k), P(k')
cov = Covariance('tree', PL)
print(cov.tree(0.1, 0.12))
