from .event_transport import IEventTransport
from .param_binder import ICommonParamBinder
from .queue_backend import DispatchRequest, IQueueBackend

__all__ = [
    "DispatchRequest",
    "ICommonParamBinder",
    "IEventTransport",
    "IQueueBackend",
]
