# main.py

import json
import logging
from typing import List, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from analysis_service import AnalysisService, get_analysis_service
from config import get_settings
from utils.corpus_store import get_corpus_store
from utils.logging_setup import configure_logging

logger = logging.getLogger(__name__)


# ----------------------------
# 0. 입력 파싱 헬퍼
# ----------------------------

def parse_word_hints(raw: Optional[str]) -> List[str]:
    """
    detectedWords 폼 필드 파싱.
    JSON 배열('["menu", "coffee"]') 또는 콤마 구분 문자열('menu, coffee') 모두 받는다.
    """
    if not raw or not raw.strip():
        return []

    raw = raw.strip()
    if raw.startswith("["):
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            raise ValueError("detectedWords 는 JSON 배열 또는 콤마 구분 문자열이어야 합니다.")
        if not isinstance(value, list) or not all(isinstance(w, str) for w in value):
            raise ValueError("detectedWords 배열에는 문자열만 들어갈 수 있습니다.")
        return [w.strip() for w in value if w.strip()]

    return [w.strip() for w in raw.split(",") if w.strip()]


# ----------------------------
# 1. 앱 생성
# ----------------------------

def create_app(service: Optional[AnalysisService] = None) -> Flask:
    """
    Flask 앱을 만든다.
    service 를 넘기지 않으면 첫 요청 때 Gemini 기반 AnalysisService 를 만든다. (테스트에서는 가짜 주입)
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = settings.max_upload_mb * 1024 * 1024
    CORS(app, origins=settings.cors_origin)

    # 코퍼스는 기동 시 한 번만 읽는다 (서비스를 주입받은 경우 그쪽 코퍼스를 쓴다)
    if service is None:
        logger.info("코퍼스 로드: %r", get_corpus_store())

    def _service() -> AnalysisService:
        return service if service is not None else get_analysis_service()

    @app.before_request
    def log_request():
        logger.info("[%s] %s", request.method, request.path)

    # ----------------------------
    # 2. /ai 라우트
    # ----------------------------

    @app.route("/ai/", methods=["GET"])
    def pingpong():
        return jsonify({"message": "pong"})

    @app.route("/ai/analyze-image", methods=["POST"])
    def analyze_image():
        image = request.files.get("image")
        if image is None or not image.filename:
            return jsonify({"error": "이미지 파일이 필요합니다."}), 400

        mime_type = image.mimetype or ""
        if not mime_type.startswith("image/"):
            return jsonify({"error": "이미지 파일만 업로드할 수 있습니다."}), 400

        try:
            hints = parse_word_hints(request.form.get("detectedWords"))
        except ValueError as e:
            return jsonify({"error": str(e)}), 400

        image_bytes = image.read()
        if not image_bytes:
            return jsonify({"error": "이미지 파일이 비어 있습니다."}), 400

        try:
            result = _service().analyze_image(
                image_bytes,
                mime_type=mime_type,
                detected_word_hints=hints,
            )
        except Exception as e:
            logger.exception("❌ /ai/analyze-image 처리 중 오류")
            return jsonify({"error": str(e)}), 500

        return jsonify(result.model_dump(by_alias=True))

    @app.route("/ai/generate-examples", methods=["POST"])
    def generate_examples():
        data = request.get_json(silent=True) or {}
        situation = data.get("situation") if isinstance(data, dict) else None

        if not isinstance(situation, str) or not situation.strip():
            return jsonify({"error": "situation 은 비어 있지 않은 문자열이어야 합니다."}), 400

        try:
            result = _service().generate_examples_for_situation(situation.strip())
        except Exception as e:
            logger.exception("❌ /ai/generate-examples 처리 중 오류")
            return jsonify({"error": str(e)}), 500

        return jsonify(result.model_dump(by_alias=True))

    @app.errorhandler(413)
    def too_large(_error):
        return jsonify({"error": f"업로드 크기 제한({settings.max_upload_mb}MB)을 넘었습니다."}), 413

    return app


# ----------------------------
# 3. 서버 실행
# ----------------------------

if __name__ == "__main__":
    settings = get_settings()
    app = create_app()
    app.run(host="127.0.0.1", port=settings.port, debug=True)
