"""Client session: login gate, preferences, recognition and rewrite sequencing."""
from __future__ import annotations
import logging
import threading
from dataclasses import replace
from typing import Any, Callable

from speech_transcriber.client import state as st
from speech_transcriber.client.api_client import ApiError, TranscriberApiClient
from speech_transcriber.client.auth import Authenticator
from speech_transcriber.client.preferences import (
    DEFAULT_PHRASES,
    ENABLE_REWRITE,
    RELEVANT_PHRASES,
    USE_CUSTOM_MODEL,
    PreferenceStore,
)
from speech_transcriber.client.recognition import (
    CUSTOM_MODEL_LANGUAGE,
    RecognitionSettings,
    Recognizer,
    RecognizerFactory,
)
from speech_transcriber.common.schema import RecognitionEvent

LOGGER = logging.getLogger("speech_transcriber.client.session")


class SessionError(Exception):
    """Raised when an operation is not allowed in the current session state."""


class TranscriberSession:
    """Drives one user's transcription against the server handlers.

    run() blocks while consuming recognizer events. stop(), logout() and
    clear() may be called from another thread; state transitions are
    serialized by a lock, and a rewrite that completes after its segment was
    cleared is dropped.
    """

    def __init__(
        self,
        api: TranscriberApiClient,
        authenticator: Authenticator,
        preferences: PreferenceStore,
        recognizer_factory: RecognizerFactory,
        language: str = CUSTOM_MODEL_LANGUAGE,
    ) -> None:
        self.api = api
        self.authenticator = authenticator
        self.preferences = preferences
        self.recognizer_factory = recognizer_factory
        self.language = language
        self.state = st.AppState()
        self._recognizer: Recognizer | None = None
        self._lock = threading.Lock()

    def _apply(self, transition: Callable[..., st.AppState], *args: Any, **kwargs: Any) -> st.AppState:
        with self._lock:
            self.state = transition(self.state, *args, **kwargs)
            return self.state

    # --- login gate ---

    def login(self, username: str, password: str) -> bool:
        username = username.strip()
        if not self.authenticator.validate(username, password):
            LOGGER.info("Login failed for user: %s", username)
            return False
        self._apply(replace, user=username)
        LOGGER.info("Login successful for user: %s", username)
        return True

    def logout(self) -> None:
        self.stop()
        self._apply(replace, user=None)

    # --- preferences ---

    @property
    def custom_model_available(self) -> bool:
        return self.language == CUSTOM_MODEL_LANGUAGE

    @property
    def use_custom_model(self) -> bool:
        return self.custom_model_available and bool(self.preferences.get(USE_CUSTOM_MODEL, False))

    def set_use_custom_model(self, enabled: bool) -> bool:
        """Persist the custom-model choice; ignored unless the language supports it."""
        if not self.custom_model_available:
            return False
        self.preferences.set(USE_CUSTOM_MODEL, bool(enabled))
        return True

    @property
    def rewrite_enabled(self) -> bool:
        return bool(self.preferences.get(ENABLE_REWRITE, False))

    def set_rewrite_enabled(self, enabled: bool) -> None:
        self.preferences.set(ENABLE_REWRITE, bool(enabled))

    @property
    def relevant_phrases(self) -> str:
        return self.preferences.get(RELEVANT_PHRASES) or DEFAULT_PHRASES

    def set_relevant_phrases(self, phrases: str) -> None:
        self.preferences.set(RELEVANT_PHRASES, phrases)

    # --- recognition ---

    def load_config(self) -> bool:
        """Fetch configuration and check the server can issue speech tokens.

        The config is kept only when both succeed, so run() refuses to start
        against a server whose speech credentials are incomplete.
        """
        try:
            config = self.api.fetch_config()
        except ApiError as e:
            LOGGER.error("Error loading API configuration: %s", e)
            return False
        try:
            self.api.fetch_speech_token()
        except ApiError as e:
            LOGGER.error("Speech API configuration is incomplete: %s", e)
            self._apply(replace, config=None)
            return False
        self._apply(replace, config=config)
        return True

    def _recognition_settings(self) -> RecognitionSettings:
        token = self.api.fetch_speech_token()
        endpoint_id = None
        config = self.state.config
        if self.use_custom_model and config is not None and config.custom_endpoint_id:
            endpoint_id = config.custom_endpoint_id
            LOGGER.info("Using custom speech model with endpoint ID: %s", endpoint_id)
        return RecognitionSettings(
            token=token.token, region=token.region, language=self.language, endpoint_id=endpoint_id
        )

    def run(self) -> st.AppState:
        """Recognize until the recognizer ends or stop() is called."""
        if not self.state.logged_in:
            raise SessionError("Login required before transcription")
        if self.state.config is None:
            raise SessionError("Configuration not loaded")
        if self._recognizer is not None:
            raise SessionError("Transcription already running")

        try:
            settings = self._recognition_settings()
        except ApiError as e:
            raise SessionError(f"Error initializing speech recognition: {e}") from e

        recognizer = self.recognizer_factory(settings)
        self._recognizer = recognizer
        self._apply(replace, listening=True)
        LOGGER.info(
            "Listening (%s%s)",
            "Custom Model" if settings.endpoint_id else "Standard Model",
            " + Text Rewriting" if self.rewrite_enabled else "",
        )
        try:
            for event in recognizer.events():
                self.handle_event(event)
        finally:
            self._recognizer = None
            self._apply(replace, listening=False)
        return self.state

    def handle_event(self, event: RecognitionEvent) -> None:
        if not event.is_final:
            self._apply(st.apply_interim, event.text)
            return
        rewrite = self.rewrite_enabled
        with self._lock:
            fresh = bool(event.text) and not st.is_duplicate(self.state, event.text)
            self.state = st.apply_final(self.state, event.text, show_original=not rewrite)
        if not (fresh and rewrite):
            return

        rewritten = self.api.rewrite(event.text, self.relevant_phrases)
        with self._lock:
            if self.state.last_original != event.text:
                LOGGER.info("Transcript changed during rewrite; dropping rewritten segment")
                return
            self.state = st.apply_rewritten(self.state, rewritten)

    def stop(self) -> None:
        recognizer = self._recognizer
        if recognizer is not None:
            recognizer.stop()
            LOGGER.info("Transcription stopped")

    # --- transcript ---

    def clear(self) -> None:
        self._apply(st.clear_transcript)

    def word_count(self) -> int:
        return st.word_count(self.state)

    def transcript_document(self) -> str | None:
        return st.render_download(self.state)
