"""Tests de decodificación y del sink de líneas."""

import io

import pytest
from prometheus_client import REGISTRY

from mqtt2jsons.core.errors import TransportError
from mqtt2jsons.mqtt.decoder import decode_payload, payloads_to_strings
from mqtt2jsons.mqtt.sink import print_strings


async def scripted(items):
    for item in items:
        if isinstance(item, BaseException):
            raise item
        yield item


def decoded_count(status: str) -> float:
    value = REGISTRY.get_sample_value(
        "mqtt2jsons_payloads_decoded_total", {"status": status}
    )
    return value or 0.0


# =============================================================================
# DECODER
# =============================================================================

class TestDecodePayload:
    """El decoder es total."""

    def test_ascii(self):
        assert decode_payload(b'{"value": 23.4}') == '{"value": 23.4}'

    def test_multibyte_utf8_round_trips(self):
        text = "temperatura 23°C ñandú 🌡"
        assert decode_payload(text.encode("utf-8")) == text

    def test_empty_payload(self):
        assert decode_payload(b"") == ""

    @pytest.mark.parametrize(
        "raw",
        [b"\xff\xfe", b"abc\x80", b"\xe2\x82", b"\xc3\x28"],
    )
    def test_invalid_utf8_yields_empty_string(self, raw):
        assert decode_payload(raw) == ""

    def test_invalid_payload_is_counted(self):
        before = decoded_count("invalid_utf8")
        decode_payload(b"\xff")
        assert decoded_count("invalid_utf8") == before + 1


class TestPayloadsToStrings:
    """Mapea el decoder sobre el stream sin tocar los errores."""

    @pytest.mark.asyncio
    async def test_maps_in_order(self):
        strings = payloads_to_strings(scripted([b"a", b"\xff", b"c"]))
        assert [s async for s in strings] == ["a", "", "c"]

    @pytest.mark.asyncio
    async def test_error_passes_through_unchanged(self):
        error = TransportError("gone")
        strings = payloads_to_strings(scripted([b"a", error]))

        assert await strings.__anext__() == "a"
        with pytest.raises(TransportError) as exc_info:
            await strings.__anext__()
        assert exc_info.value is error


# =============================================================================
# SINK
# =============================================================================

class TestPrintStrings:
    """Una línea por mensaje, en orden, hasta el primer error."""

    @pytest.mark.asyncio
    async def test_writes_one_line_per_item(self):
        out = io.StringIO()

        written = await print_strings(scripted(["x", "y", ""]), out=out)

        assert written == 3
        assert out.getvalue() == "x\ny\n\n"

    @pytest.mark.asyncio
    async def test_stops_and_surfaces_error(self):
        """["x", "y"] + error → dos líneas y luego el error."""
        out = io.StringIO()
        error = TransportError("terminal")

        with pytest.raises(TransportError) as exc_info:
            await print_strings(scripted(["x", "y", error, "never"]), out=out)

        assert exc_info.value is error
        assert out.getvalue() == "x\ny\n"

    @pytest.mark.asyncio
    async def test_defaults_to_stdout(self, capsys):
        await print_strings(scripted(["hello"]))
        assert capsys.readouterr().out == "hello\n"
