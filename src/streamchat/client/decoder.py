"""Incremental UTF-8 decoding of a streamed response body."""

import codecs
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator


class StreamDecoder:
    """Decodes byte chunks into text without splitting multi-byte characters.

    Bytes of an incomplete character at the end of a chunk are held back
    until the following chunk completes them. One decoder serves exactly
    one stream: after ``finish()`` it can't be fed again.

    Usage:
        decoder = StreamDecoder()
        for chunk in chunks:
            decoder.feed(chunk)
            render(decoder.text)
        decoder.finish()
    """

    def __init__(self, encoding: str = "utf-8", errors: str = "replace"):
        """Initialize the decoder.

        Args:
            encoding: Text encoding of the stream
            errors: Codec error handler; "replace" mirrors browser decoding,
                "strict" raises UnicodeDecodeError on invalid input
        """
        self._decoder = codecs.getincrementaldecoder(encoding)(errors=errors)
        self._text = ""
        self._finished = False

    @property
    def text(self) -> str:
        """Everything decoded so far."""
        return self._text

    @property
    def finished(self) -> bool:
        return self._finished

    def feed(self, chunk: bytes) -> str:
        """Decode one chunk and return the newly completed text."""
        if self._finished:
            raise RuntimeError("StreamDecoder already finished; use a new decoder per stream")
        delta = self._decoder.decode(chunk)
        if delta:
            self._text += delta
        return delta

    def finish(self) -> str:
        """Flush any buffered bytes at end of stream and return the remainder."""
        if self._finished:
            return ""
        self._finished = True
        delta = self._decoder.decode(b"", final=True)
        if delta:
            self._text += delta
        return delta

    def snapshots(self, chunks: Iterable[bytes]) -> Iterator[str]:
        """Yield the cumulative text after every chunk, plus after the flush.

        The final snapshot is only yielded when the flush produced text.
        """
        for chunk in chunks:
            self.feed(chunk)
            yield self.text
        if self.finish():
            yield self.text

    async def asnapshots(self, chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
        """Async counterpart of ``snapshots()``."""
        async for chunk in chunks:
            self.feed(chunk)
            yield self.text
        if self.finish():
            yield self.text
