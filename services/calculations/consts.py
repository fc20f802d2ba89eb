"""
Centralized constants for the four-pion calculations.
"""
PION_MASS = 0.13957039

PION_PDG = 211
RHO_PRIME_PDG = 30113  # rho(1700)

N_PIONS = 4

# Parametrised DCAxy resolution used when the configured cut is 0
DCA_XY_PT_CONST = 0.0105
DCA_XY_PT_SLOPE = 0.035
DCA_XY_PT_EXPONENT = 1.1

# Charge-ordered index pairs (+, +, -, -) forming the two neutral pairings
PAIRINGS = (
    ((0, 2), (1, 3)),
    ((0, 3), (1, 2)),
)

# Opposite-sign pairs whose invariant masses are recorded
PAIR_MASS_INDICES = ((0, 2), (0, 3), (1, 2), (1, 3))
