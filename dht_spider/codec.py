import bencodepy

from .errors import MalformedMessage


def encode(msg) -> bytes:
    return bencodepy.encode(msg)


def decode(datagram: bytes):
    """Decode a bencoded datagram.

    :param datagram: Raw bytes received from the network.
    :return: Decoded value. Dictionary keys are bytes.
    :raises MalformedMessage: If the datagram is not valid bencode.
    """
    try:
        return bencodepy.decode(datagram)
    except (bencodepy.BencodeDecodeError, IndexError, KeyError, TypeError, ValueError) as e:
        raise MalformedMessage('Can not decode datagram: {}'.format(e)) from e
