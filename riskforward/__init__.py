"""
riskforward - forward-looking project risk engine

Scenario-adjusted exposure curves, Monte Carlo cost and schedule ranges,
forward score projection with confidence and portfolio pressure, and
instability governance signals.
"""

__version__ = "0.1.0"
