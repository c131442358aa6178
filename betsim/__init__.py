"""Bankroll simulation for sports prediction datasets."""
