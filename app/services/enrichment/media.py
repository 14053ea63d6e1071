"""Utilities to decode data-URL payloads sent by the chat client."""

import asyncio
import base64
import binascii


def decode_data_url(data_url: str) -> bytes:
    """Decode a `data:<mime>;base64,<payload>` string into raw bytes."""
    if "," not in data_url:
        raise ValueError("Payload is not a data URL")
    _, payload = data_url.split(",", 1)
    try:
        return base64.b64decode(payload)
    except binascii.Error as exc:
        raise ValueError("Data URL payload is not valid base64") from exc


async def decode_data_url_async(data_url: str) -> bytes:
    """Decode off the event loop; uploads can be several megabytes."""
    return await asyncio.to_thread(decode_data_url, data_url)
