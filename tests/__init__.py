"""
Test suite for riskforward

Unit tests per engine area:
- Exposure engine (scenario, mitigation, time weights, portfolio)
- Monte Carlo simulation, run deltas and mitigation optimisation
- Forward projection (momentum, profiles, confidence, pressure, history)
- Governance signals (instability, fragility, early warning, drivers)
- Decision scoring, ranking and alert tags
- CLI commands
"""
