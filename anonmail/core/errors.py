"""Error taxonomy shared by the ledger, the access gate and the router."""


class AnonmailError(Exception):
    pass


class ConfigError(AnonmailError):
    pass


class StoreError(AnonmailError):
    """Redis is unreachable or an operation failed."""


class NotFoundError(AnonmailError):
    """Lookup on a forward-chat message that was never tracked (or has expired)."""

    def __init__(self, forward_message_id):
        super().__init__(f"no correspondence record for message {forward_message_id}")
        self.forward_message_id = forward_message_id


class MalformedRecordError(AnonmailError):
    """A stored record does not match `<sender> <mode> [<original id>]`."""

    def __init__(self, raw):
        super().__init__(f"wrong format: {raw!r}")
        self.raw = raw


class ChatPermissionError(AnonmailError):
    pass


class DeliveryError(AnonmailError):
    pass
