import logging

from flask import Flask, jsonify, request

from app_config import Settings
from curl_errors import CurlParseError, InvalidInput
from curl_parser import parse_curl

logger = logging.getLogger(__name__)


def create_app(settings=None):
    settings = settings or Settings.from_env()
    app = Flask(__name__)
    app.config["CURL_SETTINGS"] = settings
    # порядок заголовков важен
    app.json.sort_keys = False

    @app.get("/healthz")
    def healthz():
        return jsonify({"status": "ok"})

    @app.post("/api/curl/parse")
    def parse():
        payload = request.get_json(force=True, silent=True)
        curl_cmd = payload.get("curlCommand") if isinstance(payload, dict) else None

        try:
            if not isinstance(curl_cmd, str) or not curl_cmd.strip():
                raise InvalidInput("Нужно передать строку в поле 'curlCommand'")
            parsed = parse_curl(curl_cmd, max_length=settings.max_command_length)
            return jsonify(parsed.to_dict()), 200

        except CurlParseError as e:
            logger.info("Команда отклонена: %s", e.code)
            return jsonify(e.to_dict()), 400
        except Exception:
            logger.exception("Сбой разбора curl-команды")
            return jsonify({"error": "Failed to parse cURL command", "code": "internal_error"}), 500

    return app


app = create_app()

if __name__ == "__main__":
    settings = app.config["CURL_SETTINGS"]
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.run(host=settings.host, port=settings.port, debug=settings.debug)
