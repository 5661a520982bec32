"""Course access decisions and caller-side permission helpers."""
