"""Course curriculum: ordered sections and ordered content items."""
