"""Gateway supervision module."""

from .controller import GatewayController, IGatewayController
from .poller import IStatusPoller, StatusPoller
from .process import IGatewayProcess, OpenClawProcess

__all__ = [
    "GatewayController",
    "IGatewayController",
    "IGatewayProcess",
    "IStatusPoller",
    "OpenClawProcess",
    "StatusPoller",
]
