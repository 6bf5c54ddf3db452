"""Console logging and per-file result artifacts."""
