# app.py
import io
import logging
import os

from flask import (
    Flask, Blueprint, current_app, jsonify, request, send_file, send_from_directory
)
from werkzeug.exceptions import HTTPException
from werkzeug.utils import secure_filename

from config import Config
from errors import AppError, ValidationError
from feedback import FeedbackClient
from report import build_marklist_csv, build_report_card
from store import StudentStore, get_db, serialize_student
from utils import augment_student, validate_student_payload

logger = logging.getLogger(__name__)

STATIC_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "static")
INDEX_FILE = "index.html"

api = Blueprint("api", __name__, url_prefix="/api")


# ----------------- Helpers -----------------
def configure_logging(level="INFO"):
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _state():
    """Config, store and feedback client built once in create_app."""
    return current_app.extensions["marklist"]


def _marklist():
    state = _state()
    subjects = state["config"].SUBJECTS
    return [
        augment_student(serialize_student(doc, subjects), subjects)
        for doc in state["store"].list_all()
    ]


# ----------------- API Routes -----------------
@api.route("/health")
def health():
    return jsonify({"status": "ok"})


@api.route("/config")
def public_config():
    """Subjects the frontend should render, in display order."""
    return jsonify({"subjects": list(_state()["config"].SUBJECTS)})


@api.route("/students", methods=["GET"])
def list_students():
    """All students with total, average and grade computed from stored marks."""
    return jsonify(_marklist())


@api.route("/students", methods=["POST"])
def add_student():
    """
    Create a student record.
    Expects JSON: studentName, registerNumber and one mark per configured subject.
    """
    state = _state()
    payload = request.get_json(silent=True)
    if payload is None:
        raise ValidationError("Request body must be a JSON object.")

    record = validate_student_payload(payload, state["config"].SUBJECTS)
    saved = state["store"].insert(record)
    logger.info("Added student %s", saved["registerNumber"])
    return jsonify({
        "message": "Student added successfully!",
        "student": serialize_student(saved, state["config"].SUBJECTS),
    }), 201


@api.route("/students/<student_id>/feedback", methods=["POST"])
def student_feedback(student_id):
    """Ask the generative API for narrative feedback on one student's marks."""
    state = _state()
    doc = state["store"].get(student_id)
    marks = {s: doc.get(s) for s in state["config"].SUBJECTS}
    text = state["feedback"].request_feedback(doc["studentName"], marks)
    return jsonify({"feedback": text})


@api.route("/students/<student_id>/report", methods=["GET"])
def student_report(student_id):
    """Download a PDF report card for one student."""
    state = _state()
    subjects = state["config"].SUBJECTS
    student = augment_student(serialize_student(state["store"].get(student_id), subjects), subjects)

    pdf = build_report_card(student, subjects)
    filename = secure_filename(
        f"{student['registerNumber']}_{student['studentName']}_report.pdf"
    ) or "report.pdf"
    return send_file(io.BytesIO(pdf), as_attachment=True, download_name=filename, mimetype="application/pdf")


@api.route("/students/export", methods=["GET"])
def export_students():
    """Download the whole mark list as CSV, newest first."""
    csv_text = build_marklist_csv(_marklist(), _state()["config"].SUBJECTS)
    return send_file(
        io.BytesIO(csv_text.encode("utf-8")),
        as_attachment=True,
        download_name="marklist.csv",
        mimetype="text/csv",
    )


# ----------------- Error Handlers -----------------
def handle_app_error(e):
    return jsonify(e.to_dict()), e.status


def handle_http_error(e):
    if request.path == "/api" or request.path.startswith("/api/"):
        return jsonify({"error": e.name.lower().replace(" ", "_"), "message": e.description}), e.code
    return e


def handle_unexpected_error(e):
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    return jsonify({"error": "internal_error", "message": "Something went wrong"}), 500


# ----------------- App Factory -----------------
def create_app(config=None, db=None, feedback_client=None):
    """
    Build the Flask app.

    `db` and `feedback_client` default to a real MongoDB database and Gemini
    client built from `config`; tests pass in-memory stand-ins.
    """
    if config is None:
        config = Config.from_env()
    configure_logging(config.LOG_LEVEL)

    app = Flask(__name__, static_folder=STATIC_DIR, static_url_path="/static")

    if db is None:
        db = get_db(config)
    if feedback_client is None:
        feedback_client = FeedbackClient(
            config.GEMINI_API_KEY, model=config.GEMINI_MODEL, timeout=config.GEMINI_TIMEOUT
        )

    app.extensions["marklist"] = {
        "config": config,
        "store": StudentStore(db["students"]),
        "feedback": feedback_client,
    }

    app.register_blueprint(api)
    app.register_error_handler(AppError, handle_app_error)
    app.register_error_handler(HTTPException, handle_http_error)
    app.register_error_handler(Exception, handle_unexpected_error)

    # SPA fallback: anything that isn't an API route gets the frontend entry page.
    @app.route("/", defaults={"path": ""})
    @app.route("/<path:path>")
    def index(path):
        if path == "api" or path.startswith("api/"):
            return jsonify({"error": "not_found", "message": "Unknown API route."}), 404
        return send_from_directory(STATIC_DIR, INDEX_FILE)

    return app


# ----------------- Run -----------------
if __name__ == "__main__":
    config = Config.from_env()
    app = create_app(config)
    logger.info("Server is running on port %s", config.PORT)
    app.run(host="0.0.0.0", port=config.PORT)
