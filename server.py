# server.py
import os
import re
import logging
import threading
import tempfile
import uuid
from dataclasses import asdict
from pathlib import Path
from typing import Optional

from flask import Flask, request, jsonify, send_file
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from application.dto.stream_units import SECOND
from snipper.core import snip_file
from snipper.engine import PredictionPolicy
from snipper.utils import parse_duration, DEFAULT_PARAMS, SUPPORTED_FORMATS
from infrastructure.web.job_store import get_job, set_job, update_job, delete_job

# ── Logging ──────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("mp3_snipper")

# ── Flask app ────────────────────────────────────────────────────────
app = Flask(__name__)

# Upload size limit (100 MB hard cap)
app.config["MAX_CONTENT_LENGTH"] = 100 * 1024 * 1024

CORS(app, resources={
    r"/trim":       {"origins": ["http://localhost:5000", "http://127.0.0.1:5000"]},
    r"/status/*":   {"origins": ["http://localhost:5000", "http://127.0.0.1:5000"]},
    r"/download/*": {"origins": ["http://localhost:5000", "http://127.0.0.1:5000"]},
})

app.config["SECRET_KEY"] = os.environ.get("FLASK_SECRET_KEY") or os.urandom(32)

# ── API Blueprint Registration ─────────────────────────────────────────
from adapters.web.api_v1_blueprint import api_v1
app.register_blueprint(api_v1)

import adapters.web.openapi_spec as openapi_spec
@app.route("/api/v1/openapi.json")
def get_openapi_spec():
    return jsonify(openapi_spec.OPENAPI_SPEC)

# ════════════════════════════════════════════════════════════════════
# Upload helpers
# ════════════════════════════════════════════════════════════════════

MAX_UPLOAD_BYTES: int = 100 * 1024 * 1024  # 100 MB


def _output_ttl_seconds() -> int:
    """How long a finished download is kept (OUTPUT_TTL_SECONDS, default 30 min)."""
    try:
        return int(os.environ.get("OUTPUT_TTL_SECONDS", "1800"))
    except (ValueError, TypeError):
        return 1800


def _validate_magic_bytes(file_bytes: bytes) -> bool:
    """Return True only if the upload starts with an ID3 tag or MPEG frame sync."""
    if file_bytes[:3] == b"ID3":
        return True
    return len(file_bytes) >= 2 and file_bytes[0] == 0xFF and (file_bytes[1] & 0xE0) == 0xE0


def _download_name(filename: str) -> tuple[str, str]:
    """
    Name offered for the snipped download, and the suffix for temp files.

    Example: '../show.MP3' → ('show_snipped.mp3', '.mp3')
    """
    path = Path(filename or "upload.mp3")
    stem: str = re.sub(r"[^\w\-]", "", path.stem)[:100] or "audio"
    suffix: str = path.suffix.lower()
    if suffix not in SUPPORTED_FORMATS:
        suffix = ".mp3"
    return f"{stem}{DEFAULT_PARAMS['suffix']}{suffix}", suffix


# ════════════════════════════════════════════════════════════════════
# Job runner
# ════════════════════════════════════════════════════════════════════


def _run_trim(job_id: str, input_path: str, output_path: str, params: dict) -> None:
    """Background thread target: run the trim and update job state."""

    class _JobProgressCallback:
        """Adapter: feeds byte progress into the job store."""
        def __init__(self, jid: str) -> None:
            self.job_id = jid
            self.last = -1

        def on_bytes(self, done: int, total: int) -> None:
            progress = int(done * 100 / total) if total else 0
            if progress != self.last:
                self.last = progress
                update_job(self.job_id, {"progress": progress})

    cb = _JobProgressCallback(job_id)
    try:
        update_job(job_id, {"status": "processing", "step": "Snipping frames"})
        acc = snip_file(
            input_path  = input_path,
            output_path = output_path,
            start_after = params["start_after"],
            end_at      = params["end_at"],
            prediction  = params["prediction"],
            progress_callback = cb.on_bytes,
        )
        update_job(job_id, {
            "status": "done",
            "progress": 100,
            "step": "Finished",
            "report": asdict(acc),
        })
        _schedule_job_expiry(job_id, output_path, delay_s=_output_ttl_seconds())
        logger.info(
            "job=%s completed frames=%d included=%d",
            job_id[:8], acc.frames_encountered, acc.frames_included,
        )
    except Exception as e:
        update_job(job_id, {"status": "error", "error": str(e)})
        logger.error("job=%s failed: %s", job_id[:8], e)
        # A partial output file is useless to the client
        _safe_delete(output_path)
        # Keep the error visible to pollers until the TTL runs out
        _schedule_job_expiry(job_id, None, delay_s=_output_ttl_seconds())
    finally:
        _safe_delete(input_path)


def _safe_delete(path: str) -> None:
    """Delete a file without raising if it does not exist."""
    try:
        if path and os.path.exists(path):
            os.unlink(path)
    except OSError as e:
        logger.warning("Could not delete %s: %s", path, e)


def _expire_job(job_id: str, output_path: Optional[str]) -> None:
    """Forget a job and delete its output file, if any."""
    if output_path:
        _safe_delete(output_path)
    delete_job(job_id)
    logger.info("job=%s expired", job_id[:8])


def _schedule_job_expiry(job_id: str, output_path: Optional[str], delay_s: int = 1800) -> None:
    """Expire the job after *delay_s* seconds."""
    timer = threading.Timer(delay_s, _expire_job, args=[job_id, output_path])
    timer.daemon = True
    timer.start()


# ════════════════════════════════════════════════════════════════════
# Routes
# ════════════════════════════════════════════════════════════════════

@app.route("/trim", methods=["POST"])
def start_trim():
    """
    POST /trim
    Form fields:
      - file       : MPEG audio file (multipart)
      - start      : duration string, e.g. "25s"
      - end        : duration string (optional)
      - prediction : "first-frame" | "running-average" (optional)
    Returns: { jobId: str }
    """
    if "file" not in request.files:
        return jsonify({"error": "No file uploaded."}), 400

    audio_file = request.files["file"]

    # Magic-byte validation — read header before saving
    header = audio_file.read(16)
    audio_file.seek(0)

    if not _validate_magic_bytes(header):
        logger.warning(
            "upload rejected ip=%s reason=invalid_magic_bytes",
            request.remote_addr,
        )
        return jsonify({"error": "Unsupported or invalid MPEG audio file."}), 415

    try:
        params: dict = {
            "start_after": parse_duration(request.form.get("start", ""), "start time"),
            "end_at":      parse_duration(request.form.get("end") or DEFAULT_PARAMS["end"], "end time"),
            "prediction":  PredictionPolicy(
                request.form.get("prediction") or DEFAULT_PARAMS["prediction"]
            ),
        }
    except ValueError as e:
        return jsonify({"error": str(e).splitlines()[0]}), 400

    download_name, suffix = _download_name(audio_file.filename)

    tmp_fd_in, tmp_in = tempfile.mkstemp(suffix=suffix)
    os.close(tmp_fd_in)
    try:
        audio_file.save(tmp_in)
    except Exception:
        _safe_delete(tmp_in)
        raise

    # Post-save size check
    actual_size = os.path.getsize(tmp_in)
    if actual_size > MAX_UPLOAD_BYTES:
        os.unlink(tmp_in)
        return jsonify({"error": "File too large after save."}), 413
    if actual_size == 0:
        os.unlink(tmp_in)
        return jsonify({"error": "Empty file uploaded."}), 400

    logger.info(
        "upload accepted ip=%s size=%dB start=%.3fs end=%.3fs",
        request.remote_addr, actual_size,
        params["start_after"] / SECOND, params["end_at"] / SECOND,
    )

    tmp_fd_out, tmp_out = tempfile.mkstemp(suffix=suffix)
    os.close(tmp_fd_out)

    job_id: str = str(uuid.uuid4())
    set_job(job_id, {
        "status":      "queued",
        "progress":    0,
        "step":        "Waiting to start",
        "output_path": os.path.realpath(tmp_out),
        "download_name": download_name,
        "report":      None,
        "error":       None,
    })

    thread = threading.Thread(
        target=_run_trim,
        args=(job_id, tmp_in, tmp_out, params),
        daemon=True,
    )
    thread.start()

    return jsonify({"jobId": job_id}), 202


@app.route("/status/<job_id>", methods=["GET"])
def get_status(job_id: str):
    """
    GET /status/<jobId>
    Returns: { status, progress, step, error, report }
    """
    job = get_job(job_id)
    if not job:
        return jsonify({"error": "Job not found."}), 404
    return jsonify({
        "status":   job["status"],
        "progress": job["progress"],
        "step":     job["step"],
        "error":    job["error"],
        "report":   job["report"],
    })


@app.route("/download/<job_id>", methods=["GET"])
def download_file(job_id: str):
    """
    GET /download/<jobId>
    Returns the trimmed audio file as a binary download.
    """
    job = get_job(job_id)
    if not job or job["status"] != "done":
        return jsonify({"error": "File not ready."}), 404

    # Set by start_trim from mkstemp, never from the request
    output_path: str = job["output_path"]
    if not os.path.exists(output_path):
        delete_job(job_id)
        return jsonify({"error": "File has expired. Please trim again."}), 410

    return send_file(
        output_path,
        mimetype="audio/mpeg",
        as_attachment=True,
        download_name=job["download_name"],
    )


# ════════════════════════════════════════════════════════════════════
# Error handlers & response headers
# ════════════════════════════════════════════════════════════════════

@app.errorhandler(413)
def request_entity_too_large(e):
    return jsonify({"error": "File too large. Maximum size is 100 MB."}), 413


@app.errorhandler(404)
def not_found(e):
    return jsonify({"error": "Not found."}), 404


@app.errorhandler(Exception)
def handle_exception(e):
    """Generic handler — never leak internal details to client."""
    if isinstance(e, HTTPException):
        return jsonify({"error": e.description}), e.code
    logger.error("unhandled exception: %s", e, exc_info=True)
    return jsonify({"error": "An internal error occurred."}), 500


@app.after_request
def set_content_type_options(response):
    """Downloads are audio/mpeg; browsers must not sniff them as anything else."""
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


# ════════════════════════════════════════════════════════════════════
# Entry point
# ════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    debug_mode = os.environ.get("FLASK_DEBUG", "false").lower() == "true"
    app.run(debug=debug_mode, port=5000)
