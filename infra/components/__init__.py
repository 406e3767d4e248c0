"""Network infrastructure components."""

from infra.components.networking import Networking

__all__ = ["Networking"]
