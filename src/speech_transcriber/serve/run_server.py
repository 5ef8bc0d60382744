"""Launch the FastAPI app under uvicorn."""
from __future__ import annotations
import os

import uvicorn

def main() -> None:
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "7071"))
    uvicorn.run(
        "speech_transcriber.serve.fastapi_app:app",
        host=host,
        port=port,
        log_config=None,
    )

if __name__ == "__main__":
    main()
