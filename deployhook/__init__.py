"""deployhook - turns GitHub webhook events into deployments."""

__version__ = "0.1.0"
