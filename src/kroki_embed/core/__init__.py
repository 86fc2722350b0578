"""Site model, configuration and HTML scanning."""
