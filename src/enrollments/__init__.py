"""Enrollment lifecycle: one enrollment per (user, course), two status axes."""
