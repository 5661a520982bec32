"""Course lookup (courses are authored elsewhere; this API only reads them)."""
