"""HTTP surface: consent blueprint, health probes, error handlers."""
