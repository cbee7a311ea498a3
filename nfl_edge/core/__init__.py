"""Core mathematics and configuration for the NFL Edge simulation engine.

This package contains pure building blocks:

- ``odds_math``     — safe division, clamping, moneyline conversion, favourite detection
- ``strength``      — offensive/defensive strength ratings and relative advantage
- ``sim_config``    — every tunable simulation constant in one frozen dataclass
- ``sim_interface`` — team profile DTO, random-source protocol and result type

Nothing in this package imports from ``nfl_edge.services``.
All modules are side-effect-free and unit-testable in isolation.
"""
