"""Default prober: httpx transport + Pillow header parsing.

Reads only as many bytes as Pillow needs to identify the image, so probing
a large resource does not download the whole payload.

Cross-origin mode:
    With ``allow_cross_origin=True`` the request carries an ``Origin`` header
    and the response must grant it through ``Access-Control-Allow-Origin``
    (``*`` or the exact origin). Otherwise the probe fails with CORS_ERROR.
    With ``allow_cross_origin=False`` no ``Origin`` is sent and no grant is
    required, mirroring an anonymous (non-CORS) image load.
"""

from __future__ import annotations

import base64
import binascii
import logging
import math
from collections.abc import AsyncIterator, Iterable
from io import BytesIO
from urllib.parse import unquote_to_bytes

import httpx
from PIL import Image

from framefit.config import Settings, settings
from framefit.probe.exceptions import (
    CorsProbeError,
    InvalidDimensionsError,
    NetworkProbeError,
    ProbeError,
)
from framefit.probe.types import ProbeLoaded, ProbeResult

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = frozenset({"http", "https", "data"})

# Stop reading once this many bytes failed to identify an image
_MAX_HEADER_BYTES = 4 * 1024 * 1024


class HttpProber:
    """Probe http(s) URLs and data: URIs for intrinsic image dimensions.

    Usage:
        prober = HttpProber()
        result = await prober.probe("https://example.com/a.png", True)
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        config: Settings | None = None,
    ) -> None:
        """Initialize the prober.

        Args:
            client: Optional shared client. When omitted, each probe opens
                and closes its own client.
            config: Settings override (defaults to the module singleton).
        """
        self._client = client
        self._settings = config or settings

    async def probe(self, ref: str, allow_cross_origin: bool) -> ProbeResult:
        """Perform one load attempt and report dimensions or failure."""
        try:
            width, height = await self._load(ref, allow_cross_origin)
            _validate_dimensions(width, height, ref)
        except ProbeError as e:
            logger.debug(
                "Probe failed",
                extra={"reason": e.reason.value, "cross_origin": allow_cross_origin},
            )
            return e.to_result()
        return ProbeLoaded(width=width, height=height)

    async def _load(self, ref: str, allow_cross_origin: bool) -> tuple[int, int]:
        scheme = ref.split(":", 1)[0].lower() if ":" in ref else ""
        if scheme not in SUPPORTED_SCHEMES:
            raise NetworkProbeError(f"Unsupported locator scheme {scheme!r}", ref)

        if scheme == "data":
            # Inline payloads are same-origin; the CORS flag has no effect
            return _dimensions_from_chunks([_decode_data_uri(ref)], ref)

        if self._client is not None:
            return await self._fetch(self._client, ref, allow_cross_origin)

        async with httpx.AsyncClient(
            timeout=self._settings.PROBE_REQUEST_TIMEOUT_S,
            follow_redirects=True,
        ) as client:
            return await self._fetch(client, ref, allow_cross_origin)

    async def _fetch(
        self,
        client: httpx.AsyncClient,
        ref: str,
        allow_cross_origin: bool,
    ) -> tuple[int, int]:
        headers = {
            "User-Agent": self._settings.PROBE_USER_AGENT,
            "Accept": "image/*",
        }
        origin = self._settings.PROBE_ORIGIN
        if allow_cross_origin:
            headers["Origin"] = origin

        try:
            async with client.stream("GET", ref, headers=headers) as response:
                if response.status_code >= 400:  # noqa: PLR2004
                    raise NetworkProbeError(
                        f"HTTP {response.status_code} while loading resource", ref
                    )
                if allow_cross_origin:
                    granted = response.headers.get("access-control-allow-origin")
                    if granted not in ("*", origin):
                        raise CorsProbeError(
                            f"Cross-origin access not granted for {origin}", ref
                        )
                return await _dimensions_from_stream(response.aiter_bytes(), ref)
        except httpx.InvalidURL as e:
            raise NetworkProbeError(f"Invalid URL: {e}", ref) from e
        except httpx.HTTPError as e:
            raise NetworkProbeError(f"Transport error: {e}", ref) from e


def _decode_data_uri(ref: str) -> bytes:
    """Decode the payload of a ``data:`` URI."""
    header, sep, payload = ref.partition(",")
    if not sep:
        raise NetworkProbeError("Malformed data URI (missing ',')", ref)
    if header.lower().endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError) as e:
            raise InvalidDimensionsError(f"Undecodable base64 payload: {e}", ref) from e
    return unquote_to_bytes(payload)


class _HeaderReader:
    """Accumulates payload bytes until Pillow can identify the image.

    A header split across chunks makes Pillow raise (``Truncated File Read``
    for a JPEG whose EXIF or ICC segment is still arriving, or
    ``UnidentifiedImageError`` before the magic bytes). Both mean "not
    enough data yet". The reader retries once the buffer has doubled and
    gives up only when the stream ends or the cap is hit.
    """

    def __init__(self, ref: str) -> None:
        self._ref = ref
        self._buffer = bytearray()
        self._attempted = 0
        self._last_error: Exception | None = None
        self.size: tuple[int, int] | None = None

    def feed(self, chunk: bytes) -> bool:
        """Add one chunk; return True once dimensions are known or the cap is hit."""
        self._buffer.extend(chunk)
        capped = len(self._buffer) >= _MAX_HEADER_BYTES
        if capped or len(self._buffer) >= 2 * self._attempted:
            self._identify()
        return self.size is not None or capped

    def result(self) -> tuple[int, int]:
        """Return dimensions, parsing any bytes that arrived since the last try."""
        if self.size is None and len(self._buffer) > self._attempted:
            self._identify()
        if self.size is None:
            message = (
                f"Payload is not a recognizable image "
                f"({len(self._buffer)} bytes read)"
            )
            if self._last_error is not None:
                message = f"{message}: {self._last_error}"
            raise InvalidDimensionsError(message, self._ref)
        return self.size

    def _identify(self) -> None:
        self._attempted = len(self._buffer)
        try:
            # Image.open is lazy: it parses the header without decoding pixels
            with Image.open(BytesIO(self._buffer)) as image:
                self.size = image.size
        except Image.DecompressionBombError as e:
            raise InvalidDimensionsError(
                f"Unreadable image data: {e}", self._ref
            ) from e
        except (OSError, SyntaxError, ValueError) as e:
            self._last_error = e


def _dimensions_from_chunks(chunks: Iterable[bytes], ref: str) -> tuple[int, int]:
    reader = _HeaderReader(ref)
    for chunk in chunks:
        if reader.feed(chunk):
            break
    return reader.result()


async def _dimensions_from_stream(
    chunks: AsyncIterator[bytes],
    ref: str,
) -> tuple[int, int]:
    reader = _HeaderReader(ref)
    async for chunk in chunks:
        if reader.feed(chunk):
            break
    return reader.result()


def _validate_dimensions(width: float, height: float, ref: str) -> None:
    """Reject zero, negative, or non-finite dimensions."""
    for value in (width, height):
        if not math.isfinite(value) or value < 1:
            raise InvalidDimensionsError(
                f"Invalid image dimensions {width}x{height}", ref
            )
