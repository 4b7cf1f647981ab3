# !!!
# TO RUN THE SERVER: uvicorn app:app --host 0.0.0.0 --port 8000
# !!!

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from probefinder.audio import load_signal
from probefinder.config import AUDIO_PATTERN, SUPPORTED_SUFFIXES
from probefinder.errors import ProbeFinderError, UnknownTrack
from probefinder.log import log_detail, log_match, log_section, log_step, log_success, setup_logging
from probefinder.recognizer import ProbeRecognizer

CATALOG_DIR = os.getenv("PROBEFINDER_CATALOG_DIR", "")
CATALOG_PATTERN = os.getenv("PROBEFINDER_PATTERN", AUDIO_PATTERN)

log = setup_logging()


async def _save_upload(file: UploadFile) -> str:
    """Write an upload to a temp file (the audio decoders want a path)."""
    filename = (file.filename or "").lower()
    suffix = Path(filename).suffix
    if suffix not in SUPPORTED_SUFFIXES:
        log.warning("Invalid file format: %s", filename or "unknown")
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported audio format. Expected one of: {', '.join(SUPPORTED_SUFFIXES)}",
        )
    content = await file.read()
    if not content:
        log.warning("Empty file upload rejected")
        raise HTTPException(status_code=400, detail="Empty upload.")
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
        tmp.write(content)
    log_detail("File size", f"{len(content) / 1024:.1f} KB")
    return tmp.name


def _cleanup(tmp_path: Optional[str]) -> None:
    if tmp_path and os.path.exists(tmp_path):
        os.remove(tmp_path)
        log.debug("Temporary file cleaned up")


def create_app(recognizer: Optional[ProbeRecognizer] = None,
               catalog_dir: str = CATALOG_DIR,
               pattern: str = CATALOG_PATTERN) -> FastAPI:
    """Build the API around *recognizer* (a fresh one if omitted)."""
    log_section("🎵 ProbeFinder API Server")
    app = FastAPI(title="ProbeFinder API", version="1.0")

    if recognizer is None:
        log_step(1, "Initializing probe recognizer...")
        recognizer = ProbeRecognizer()
        if catalog_dir:
            log_detail("Catalog folder", catalog_dir)
            indexed = recognizer.index_folder(Path(catalog_dir), pattern)
            log_success(f"Indexed {indexed} songs")
    app.state.recognizer = recognizer

    @app.get("/health")
    def health() -> Dict[str, str]:
        log.debug("Health check requested")
        return {"status": "ok"}

    @app.get("/tracks")
    def tracks() -> List[Dict[str, Any]]:
        return [
            {"track_id": t.track_id, "title": t.description, "hash_points": t.num_hash_points}
            for t in recognizer.catalog
        ]

    @app.delete("/tracks/{track_id}")
    def delete_track(track_id: int) -> Dict[str, Any]:
        try:
            info = recognizer.remove_song(track_id)
        except UnknownTrack:
            raise HTTPException(status_code=404, detail=f"Unknown track id {track_id}")
        log_success(f"Removed '{info.description}' (track {track_id})")
        return {"track_id": info.track_id, "title": info.description}

    @app.post("/index")
    async def index(
        file: UploadFile = File(...),
        title: Optional[str] = Form(None),
    ) -> JSONResponse:
        log.info("📥 New indexing request: %s", file.filename or "unknown")
        tmp_path = None
        try:
            tmp_path = await _save_upload(file)
            name = title or Path(file.filename or "untitled").stem
            info = recognizer.index_signal(load_signal(tmp_path, name=name))
        except ProbeFinderError as e:
            log.warning("Indexing rejected: %s", e)
            raise HTTPException(status_code=400, detail=str(e))
        except RuntimeError as e:
            log.warning("Could not decode upload: %s", e)
            raise HTTPException(status_code=400, detail="Could not decode audio.")
        finally:
            _cleanup(tmp_path)

        log_success(f"Indexed '{info.description}' as track {info.track_id}")
        return JSONResponse(
            {
                "track_id": info.track_id,
                "title": info.description,
                "hash_points": info.num_hash_points,
            }
        )

    @app.post("/recognize")
    async def recognize(file: UploadFile = File(...)) -> JSONResponse:
        log.info("🎧 New recognition request received")
        log_detail("Filename", file.filename or "unknown")
        tmp_path = None
        try:
            tmp_path = await _save_upload(file)
            title, match_rate, meta = recognizer.recognize(Path(tmp_path))
        except ProbeFinderError as e:
            log.warning("Recognition rejected: %s", e)
            raise HTTPException(status_code=400, detail=str(e))
        except RuntimeError as e:
            log.warning("Could not decode upload: %s", e)
            raise HTTPException(status_code=400, detail="Could not decode audio.")
        finally:
            _cleanup(tmp_path)

        log_match(title, match_rate, meta["best_song_votes"], meta["offset_seconds"])

        return JSONResponse(
            {
                "title": title,
                "track_id": meta["track_id"],
                "match_rate": match_rate,  # normalized [0,1]
                "votes": meta["best_song_votes"] if title else 0,
                "offset_seconds": meta["offset_seconds"],
            }
        )

    log_section("🚀 Server Ready")
    return app


app = create_app()
