from typing import Any

import msgspec

__all__ = ("decode_json", "encode_json")

_encoder = msgspec.json.Encoder(enc_hook=str)
_decoder = msgspec.json.Decoder()


def encode_json(data: Any) -> str:
    """Encode data to a JSON string.

    Args:
        data: Data to encode.

    Returns:
        JSON string representation.
    """
    return _encoder.encode(data).decode("utf-8")


def decode_json(data: "str | bytes") -> Any:
    """Decode a JSON string or bytes to a Python object.

    Args:
        data: JSON string or bytes to decode.

    Returns:
        Decoded Python object.
    """
    return _decoder.decode(data)
