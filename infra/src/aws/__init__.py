"""AWS infrastructure modules."""

from src.aws import compute, identity, network, provider, website

__all__ = ["compute", "identity", "network", "provider", "website"]
