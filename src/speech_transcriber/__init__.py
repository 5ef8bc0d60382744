"""
Speech Transcriber package.

Provides:
- HTTP handlers for configuration, speech-token issuance and transcript rewriting (FastAPI)
- A client session that drives a speech recognizer and the rewrite relay
"""
