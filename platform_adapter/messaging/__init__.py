"""Broker messaging: envelopes, topics, publishing and RPC dispatch."""

from .dispatcher import BrokerDispatcher, RequestHandler
from .envelope import ErrorDetail, EventMessage, PendingRequest, RequestEnvelope, ResponseEnvelope
from .publisher import Publisher
from .request_client import RequestClient

__all__ = [
    "BrokerDispatcher",
    "ErrorDetail",
    "EventMessage",
    "PendingRequest",
    "Publisher",
    "RequestClient",
    "RequestEnvelope",
    "RequestHandler",
    "ResponseEnvelope",
]
