class BridgeError(Exception):
    """Base class for operation bridge failures."""


class TransportError(BridgeError):
    """A forwarded operation could not be delivered or answered."""


class NoChannelError(TransportError):
    def __init__(self) -> None:
        super().__init__("No connected EventStorming clients")


class ChannelRejectedError(TransportError):
    def __init__(self, channel_id: str) -> None:
        super().__init__(f"Channel '{channel_id}' rejected: another client is already connected")
        self.channel_id = channel_id


class ChannelClosedError(TransportError):
    def __init__(self, channel_id: str) -> None:
        super().__init__(f"Channel '{channel_id}' closed before responding")
        self.channel_id = channel_id


class RequestTimeoutError(TransportError):
    def __init__(self, request_id: int, timeout: float) -> None:
        super().__init__(f"Request {request_id} timed out after {timeout:g}s")
        self.request_id = request_id
        self.timeout = timeout
