"""Speech recognizer interface.

The vendor SDK stays behind this boundary; the session only sees a lazy
sequence of RecognitionEvent values.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Iterator, Protocol

from speech_transcriber.common.schema import RecognitionEvent

CUSTOM_MODEL_LANGUAGE = "zh-CN"


@dataclass(frozen=True)
class RecognitionSettings:
    token: str
    region: str
    language: str
    endpoint_id: str | None = None


class Recognizer(Protocol):
    def events(self) -> Iterator[RecognitionEvent]:
        """Yield interim and final results until stopped or exhausted."""
        ...

    def stop(self) -> None:
        """Flush pending results, release resources and end events()."""
        ...


RecognizerFactory = Callable[[RecognitionSettings], Recognizer]
