"""Gateway types for media inputs and remote responses.

Response extraction helpers live here so the facade's extractors and the
poller read the Generative Language API payloads the same way.
"""

import base64
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class MediaInput:
    """An image attached by the user.

    Immutable, so one instance can be shared by concurrent operations.
    """

    filename: str
    data: bytes
    media_type: str = "image/png"

    @classmethod
    def from_base64(
        cls, filename: str, encoded: str, media_type: str = "image/png"
    ) -> "MediaInput":
        """Build a MediaInput from a base64 string (data URLs accepted).

        Raises:
            binascii.Error: If the string holds characters outside the
                base64 alphabet (a ValueError subclass).
        """
        if encoded.startswith("data:") and "," in encoded:
            header, encoded = encoded.split(",", 1)
            media_type = header[len("data:"):].split(";", 1)[0] or media_type
        data = base64.b64decode("".join(encoded.split()), validate=True)
        return cls(filename=filename, data=data, media_type=media_type)

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_inline_part(self) -> Dict[str, Any]:
        """Return a generateContent ``inlineData`` part for this image."""
        return {"inlineData": {"mimeType": self.media_type, "data": self.to_base64()}}


@dataclass
class OperationHandle:
    """Handle to a long-running remote operation.

    Attributes:
        name: Opaque operation name, e.g. "models/veo-2.0/operations/abc".
        done: Whether the operation reached a terminal state.
        response: Result payload once done.
        error: Error object if the operation finished unsuccessfully.
    """

    name: str
    done: bool = False
    response: Optional[Dict[str, Any]] = None
    error: Optional[Dict[str, Any]] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "OperationHandle":
        """Build a handle from an operations resource JSON body."""
        return cls(
            name=str(payload.get("name") or ""),
            done=payload.get("done") is True,
            response=payload.get("response"),
            error=payload.get("error"),
        )

    def result_links(self) -> List[str]:
        """Return the video URIs of a finished video operation.

        Reads ``response.generateVideoResponse.generatedSamples[].video.uri``.
        """
        if not isinstance(self.response, dict):
            return []
        generated = self.response.get("generateVideoResponse")
        if not isinstance(generated, dict):
            return []
        samples = generated.get("generatedSamples") or []
        if isinstance(samples, dict):
            samples = [samples]

        links = []
        for sample in samples:
            if not isinstance(sample, dict):
                continue
            video = sample.get("video")
            if isinstance(video, dict) and isinstance(video.get("uri"), str) and video["uri"]:
                links.append(video["uri"])
        return links


@dataclass
class ContentParts:
    """Parts of the first candidate of a generateContent response."""

    texts: List[str] = field(default_factory=list)
    images: List[bytes] = field(default_factory=list)
    block_reason: Optional[str] = None

    @property
    def text(self) -> str:
        return "".join(self.texts).strip()


def extract_content_parts(data: Dict[str, Any]) -> ContentParts:
    """Collect text and inline image parts from a generateContent response."""
    parts = ContentParts()

    feedback = data.get("promptFeedback")
    if isinstance(feedback, dict):
        parts.block_reason = feedback.get("blockReason")

    candidates = data.get("candidates") or []
    if not candidates:
        return parts

    content = candidates[0].get("content") or {}
    for part in content.get("parts") or []:
        inline = part.get("inlineData") or part.get("inline_data")
        if isinstance(inline, dict) and inline.get("data"):
            parts.images.append(base64.b64decode(inline["data"]))
        elif isinstance(part.get("text"), str):
            parts.texts.append(part["text"])
    return parts


def extract_predicted_images(data: Dict[str, Any]) -> List[bytes]:
    """Decode the images of an Imagen ``:predict`` response."""
    images = []
    for prediction in data.get("predictions") or []:
        encoded = prediction.get("bytesBase64Encoded")
        if encoded:
            images.append(base64.b64decode(encoded))
    return images
