"""Unit and property-based tests for StreamDecoder."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from streamchat.client.decoder import StreamDecoder

# U+FFFD in the source text would hide spurious replacements
texts = st.text(alphabet=st.characters(exclude_characters="\ufffd"), max_size=200)


def split_at(data: bytes, points: list[int]) -> list[bytes]:
    """Split bytes at the given (unsorted, possibly repeated) offsets."""
    bounds = [0, *sorted(set(points)), len(data)]
    return [data[a:b] for a, b in zip(bounds, bounds[1:])]


class TestStreamDecoder:
    """Tests for chunked decoding."""

    def test_ascii_chunks(self):
        decoder = StreamDecoder()
        assert decoder.feed(b"Hel") == "Hel"
        assert decoder.feed(b"lo") == "lo"
        assert decoder.finish() == ""
        assert decoder.text == "Hello"

    def test_multibyte_character_split_across_chunks(self):
        """Test that a split character is held back until it completes."""
        data = "é".encode("utf-8")
        decoder = StreamDecoder()

        assert decoder.feed(data[:1]) == ""
        assert decoder.text == ""
        assert decoder.feed(data[1:]) == "é"
        assert decoder.text == "é"

    def test_emoji_split_into_single_bytes(self):
        decoder = StreamDecoder()
        for byte in "😀".encode("utf-8"):
            decoder.feed(bytes([byte]))
        assert decoder.text == "😀"

    def test_incomplete_tail_is_replaced_on_finish(self):
        decoder = StreamDecoder()
        decoder.feed(b"ok" + "é".encode("utf-8")[:1])

        assert decoder.finish() == "\ufffd"
        assert decoder.text == "ok\ufffd"

    def test_strict_mode_raises_on_invalid_bytes(self):
        decoder = StreamDecoder(errors="strict")
        with pytest.raises(UnicodeDecodeError):
            decoder.feed(b"\xff\xfe")

    def test_feed_after_finish_raises(self):
        decoder = StreamDecoder()
        decoder.finish()

        assert decoder.finished
        with pytest.raises(RuntimeError):
            decoder.feed(b"more")

    def test_finish_is_idempotent(self):
        decoder = StreamDecoder()
        decoder.feed(b"abc")
        decoder.finish()
        assert decoder.finish() == ""
        assert decoder.text == "abc"

    def test_snapshots_are_cumulative(self):
        data = "añb".encode("utf-8")
        snapshots = list(StreamDecoder().snapshots([data[:2], data[2:3], data[3:]]))
        assert snapshots == ["a", "añ", "añb"]

    @pytest.mark.asyncio
    async def test_asnapshots(self):
        async def chunks():
            yield b"Hi "
            yield "日".encode("utf-8")[:2]
            yield "日".encode("utf-8")[2:]

        snapshots = [s async for s in StreamDecoder().asnapshots(chunks())]
        assert snapshots == ["Hi ", "Hi ", "Hi 日"]


class TestStreamDecoderProperties:
    """Property-based tests for arbitrary chunk boundaries."""

    @given(texts, st.lists(st.integers(min_value=0, max_value=800), max_size=10))
    def test_any_chunking_reproduces_text(self, text: str, points: list[int]):
        """Property test: decoding is independent of where the bytes were split."""
        data = text.encode("utf-8")
        chunks = split_at(data, [p for p in points if p <= len(data)])

        snapshots = list(StreamDecoder().snapshots(chunks))

        assert (snapshots[-1] if snapshots else "") == text
        for snapshot in snapshots:
            assert "\ufffd" not in snapshot
            assert text.startswith(snapshot)

    @given(texts)
    def test_every_two_way_split(self, text: str):
        """Property test: every single split point yields the original text."""
        data = text.encode("utf-8")
        for i in range(len(data) + 1):
            decoder = StreamDecoder()
            decoder.feed(data[:i])
            decoder.feed(data[i:])
            decoder.finish()
            assert decoder.text == text
