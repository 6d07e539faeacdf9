"""Service layer: analysis, revisit checks, scanning and alert delivery."""
