"""NFL Edge — Monte Carlo game outcome simulation for NFL betting markets."""

__version__ = "0.9.0"
