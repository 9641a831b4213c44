"""
Translation request/response records.

A request is the cacheable unit: the provider sees exactly these fields and
the fingerprint is derived from them. Responses serialize to a self-describing
JSON document so a cached entry always decodes back to the same variant.
"""
import base64
import json
from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class RequestFormat(str, Enum):
    TEXT = "text"
    FILE = "file"


@dataclass(frozen=True)
class TranslationRequest:
    format: RequestFormat
    source_lang: str
    target_lang: str
    text: tuple[str, ...] = ()
    data: bytes = b""
    filename: str = ""

    @classmethod
    def for_text(cls, segments: Iterable[str], source_lang: str, target_lang: str) -> "TranslationRequest":
        return cls(
            format=RequestFormat.TEXT,
            source_lang=source_lang,
            target_lang=target_lang,
            text=tuple(segments),
        )

    @classmethod
    def for_file(cls, data: bytes, filename: str, source_lang: str, target_lang: str) -> "TranslationRequest":
        return cls(
            format=RequestFormat.FILE,
            source_lang=source_lang,
            target_lang=target_lang,
            data=data,
            filename=filename,
        )

    def payload(self) -> bytes:
        """Bytes that identify the content to translate.

        Text segments are length-prefixed (``<len>:<utf-8 bytes>``) so that
        segment boundaries survive concatenation; files use their raw bytes.
        """
        if self.format is RequestFormat.FILE:
            return self.data
        framed = bytearray()
        for segment in self.text:
            encoded = segment.encode("utf-8")
            framed += f"{len(encoded)}:".encode("ascii")
            framed += encoded
        return bytes(framed)

    @property
    def payload_size(self) -> int:
        if self.format is RequestFormat.FILE:
            return len(self.data)
        return sum(len(segment.encode("utf-8")) for segment in self.text)


@dataclass(frozen=True)
class TranslationResponse:
    format: RequestFormat
    text: tuple[str, ...] = ()
    data: bytes = b""

    @classmethod
    def for_text(cls, segments: Iterable[str]) -> "TranslationResponse":
        return cls(format=RequestFormat.TEXT, text=tuple(segments))

    @classmethod
    def for_file(cls, data: bytes) -> "TranslationResponse":
        return cls(format=RequestFormat.FILE, data=data)

    def matches(self, request: TranslationRequest) -> bool:
        """True when this response is a valid answer for ``request``."""
        if self.format is not request.format:
            return False
        if self.format is RequestFormat.TEXT:
            return len(self.text) == len(request.text)
        return True

    def to_json(self) -> bytes:
        if self.format is RequestFormat.TEXT:
            document = {"format": self.format.value, "text": list(self.text)}
        else:
            document = {
                "format": self.format.value,
                "data": base64.b64encode(self.data).decode("ascii"),
            }
        return json.dumps(document, ensure_ascii=False).encode("utf-8")

    @classmethod
    def from_json(cls, raw: bytes | str) -> "TranslationResponse":
        """Decode a serialized response.

        Raises:
            ValueError: If the document is not a serialized response
        """
        document = json.loads(raw)
        if not isinstance(document, dict):
            raise ValueError("cached translation is not an object")

        response_format = RequestFormat(document.get("format"))
        if response_format is RequestFormat.TEXT:
            text = document.get("text")
            if not isinstance(text, list) or not all(isinstance(s, str) for s in text):
                raise ValueError("cached text translation has no segment list")
            return cls.for_text(text)

        data = document.get("data")
        if not isinstance(data, str):
            raise ValueError("cached file translation has no data")
        return cls.for_file(base64.b64decode(data, validate=True))


@dataclass(frozen=True)
class TranslationOutcome:
    response: TranslationResponse
    cache_hit: bool

    @property
    def cache_status(self) -> str:
        return "HIT" if self.cache_hit else "MISS"
