"""Per-record and per-dataset pipeline stages, in processing order."""
