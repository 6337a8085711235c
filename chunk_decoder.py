# chunk_decoder.py
# Turn the raw generation stream into delta-content events.
#
# The body of /api/generate is newline-delimited JSON. Each line is expected to
# look like {"choices": [{"delta": {"content": "..."}}]}. Blank lines, control
# lines without a delta, and anything that is not JSON are skipped silently.

import codecs
import json
from typing import AsyncIterable, AsyncIterator, Optional

from models import GenerationChunkEvent


def parse_chunk_line(line: str) -> Optional[GenerationChunkEvent]:
    """
    Parse one protocol line.

    Returns:
        GenerationChunkEvent carrying choices[0].delta.content, or None when the
        line is blank, malformed, or has no string content
    """
    if not line.strip():
        return None
    try:
        payload = json.loads(line)
    except ValueError:
        return None

    try:
        content = payload["choices"][0]["delta"]["content"]
    except (KeyError, IndexError, TypeError):
        return None

    if not isinstance(content, str):
        return None
    return GenerationChunkEvent(delta_text=content)


async def decode_chunks(byte_stream: AsyncIterable[bytes]) -> AsyncIterator[GenerationChunkEvent]:
    """
    Decode a byte stream into chunk events, in arrival order.

    A line split across two reads is held until its end arrives; whatever is
    left when the stream ends is parsed as a last line. Errors raised by the
    underlying stream are not caught here.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    pending = ""

    async for buffer in byte_stream:
        if not buffer:
            continue
        pending += decoder.decode(buffer)
        *lines, pending = pending.split("\n")
        for line in lines:
            event = parse_chunk_line(line)
            if event is not None:
                yield event

    pending += decoder.decode(b"", final=True)
    event = parse_chunk_line(pending)
    if event is not None:
        yield event
