"""DIBEA agent router: deterministic message routing for the portal chat."""

__version__ = "0.1.0"
