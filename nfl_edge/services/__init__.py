"""Simulation pipeline: injuries, weather, possessions, games and aggregation."""
