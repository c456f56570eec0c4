"""NFSv3 mount driver: option negotiation + mount helper invocation."""

from .errors import (
    InvocationError,
    MissingMandatoryOptionsError,
    NegotiationError,
    UnsupportedOptionsError,
)
from .options import OptionSet, uniformize
from .negotiation import Negotiation, NegotiationConfig
from .invoker import SubprocessInvoker
from .mounter import Mounter
from .config import DriverConfig
from .server import MountServer
from .client import DriverEndpoint, MountClient
from .cli import main as driver_main

__all__ = [
    "InvocationError",
    "MissingMandatoryOptionsError",
    "NegotiationError",
    "UnsupportedOptionsError",
    "OptionSet",
    "uniformize",
    "Negotiation",
    "NegotiationConfig",
    "SubprocessInvoker",
    "Mounter",
    "DriverConfig",
    "MountServer",
    "DriverEndpoint",
    "MountClient",
    "driver_main",
]
