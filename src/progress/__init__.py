"""Learner progress: per-content completion records and computed course progress."""
