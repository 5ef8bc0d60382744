"""Transcriber client state and the pure transitions over it."""
from __future__ import annotations
import datetime as dt
from dataclasses import dataclass, replace
from typing import Optional

from speech_transcriber.client.api_client import ClientConfig

ORIGINAL = "original"
REWRITTEN = "rewritten"


@dataclass(frozen=True)
class AppState:
    user: Optional[str] = None
    listening: bool = False
    config: Optional[ClientConfig] = None
    full_transcript: tuple[str, ...] = ()
    rewritten_transcript: tuple[str, ...] = ()
    last_original: str = ""
    interim: str = ""
    # (kind, text) lines in display order; kind is ORIGINAL or REWRITTEN.
    lines: tuple[tuple[str, str], ...] = ()

    @property
    def logged_in(self) -> bool:
        return self.user is not None


def apply_interim(state: AppState, text: str) -> AppState:
    if not text:
        return state
    return replace(state, interim=text)


def is_duplicate(state: AppState, text: str) -> bool:
    return text == state.last_original


def apply_final(state: AppState, text: str, show_original: bool = True) -> AppState:
    """Record a finalized segment. Repeats of the previous segment are dropped."""
    state = replace(state, interim="")
    if not text or is_duplicate(state, text):
        return state
    lines = state.lines + ((ORIGINAL, text),) if show_original else state.lines
    return replace(
        state,
        full_transcript=state.full_transcript + (text,),
        last_original=text,
        lines=lines,
    )


def apply_rewritten(state: AppState, text: str) -> AppState:
    if not text:
        return state
    return replace(
        state,
        rewritten_transcript=state.rewritten_transcript + (text,),
        lines=state.lines + ((REWRITTEN, text),),
    )


def clear_transcript(state: AppState) -> AppState:
    return replace(
        state, full_transcript=(), rewritten_transcript=(), last_original="", interim="", lines=()
    )


def _joined(segments: tuple[str, ...]) -> str:
    return "".join(f"{s} " for s in segments)


def word_count(state: AppState) -> int:
    return len(_joined(state.full_transcript).split())


def render_download(state: AppState) -> str | None:
    """Plain-text transcript document, or None when there is nothing to save."""
    raw = _joined(state.full_transcript)
    rewritten = _joined(state.rewritten_transcript)
    if not raw.strip() and not rewritten.strip():
        return None
    content = ""
    if raw.strip():
        content += f"RAW TRANSCRIPT:\n{raw}\n\n"
    if rewritten.strip():
        content += f"REWRITTEN TRANSCRIPT:\n{rewritten}"
    return content


def download_filename(today: dt.date | None = None) -> str:
    today = today or dt.date.today()
    return f"transcript-{today.isoformat()}.txt"
