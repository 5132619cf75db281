class KRPCError(Exception):
    pass


class MalformedMessage(KRPCError):
    """Undecodable datagram, missing field or identifier of the wrong length."""


class InvalidFieldValue(KRPCError):
    """Well-formed field with an unacceptable value: port out of range, bad token, our own node."""


class TransportFailure(KRPCError):
    pass
