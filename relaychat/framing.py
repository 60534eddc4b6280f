"""
Framing helpers for the WebSocket event channel.
Format: one UTF-8 JSON object per text frame, with the event name under "type".
"""
import json

from .errors import InvalidFrame


def encode_frame(obj) -> str:
    return json.dumps(obj, separators=(',', ':'))


def decode_frame(text: str) -> dict:
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidFrame('invalid json') from e
    if not isinstance(obj, dict):
        raise InvalidFrame('frame must be a JSON object')
    return obj
