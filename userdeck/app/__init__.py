"""Application wiring: settings, service container and console entry point."""
