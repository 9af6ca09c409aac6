from flask import Flask, request, jsonify
from dotenv import load_dotenv
import os
import logging
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from goals import goal_timeline_from_sip, required_monthly_sip, future_value_of_sip
from planner import run_cash_flow_plan, run_goal_plan
from recommendation_cache import RecommendationCache, recommendation_cache_key

# --- Initialization ---
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)
# Respect reverse proxy headers (scheme/host) when deployed behind one
app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

# Externally generated recommendations, keyed by goal + client data
recommendations = RecommendationCache()


def _json_body():
    """Request body as a dict, or None when it is missing or not an object."""
    data = request.get_json(force=True, silent=True)
    return data if isinstance(data, dict) else None


# --- Routes ---
@app.route('/healthz', methods=['GET'])
def healthz():
    return jsonify({"status": "ok"}), 200


@app.route("/plan/cash-flow", methods=["POST"])
def plan_cash_flow():
    data = _json_body()
    if data is None:
        return jsonify({"error": "JSON object body required"}), 400
    return jsonify(run_cash_flow_plan(data)), 200


@app.route("/plan/goals", methods=["POST"])
def plan_goals():
    data = _json_body()
    if data is None:
        return jsonify({"error": "JSON object body required"}), 400
    if not isinstance(data.get("goals"), list):
        return jsonify({"error": "goals must be a list"}), 400
    return jsonify(run_goal_plan(data)), 200


@app.route("/calculators/sip", methods=["POST"])
def calculator_sip():
    data = _json_body()
    if data is None:
        return jsonify({"error": "JSON object body required"}), 400
    target = data.get("targetAmount")
    years = data.get("years")
    rate = data.get("expectedReturn", 12)
    sip = required_monthly_sip(target, years, rate)
    return jsonify({
        "monthlySIP": sip,
        "projectedValue": future_value_of_sip(sip, years, rate),
    }), 200


@app.route("/calculators/timeline", methods=["POST"])
def calculator_timeline():
    data = _json_body()
    if data is None:
        return jsonify({"error": "JSON object body required"}), 400
    years = goal_timeline_from_sip(data.get("targetAmount"), data.get("monthlySIP"), data.get("expectedReturn", 12))
    return jsonify({"years": years}), 200


@app.route("/recommendations", methods=["PUT"])
def recommendations_store():
    data = _json_body()
    if data is None or "recommendations" not in data:
        return jsonify({"error": "goal, clientData and recommendations required"}), 400
    key = recommendation_cache_key(data.get("goal"), data.get("clientData"))
    recommendations.set(key, data["recommendations"])
    logger.info(f"Stored recommendations {key[:12]}")
    return jsonify({"status": "ok", "key": key}), 200


@app.route("/recommendations/lookup", methods=["POST"])
def recommendations_lookup():
    data = _json_body()
    if data is None:
        return jsonify({"error": "JSON object body required"}), 400
    key = recommendation_cache_key(data.get("goal"), data.get("clientData"))
    cached = recommendations.get(key)
    if cached is None:
        return jsonify({"error": "not found"}), 404
    return jsonify({"key": key, "recommendations": cached}), 200


@app.errorhandler(500)
def internal_error(e):
    logger.error(f"Unhandled error: {e}")
    return jsonify({"error": "internal server error"}), 500


# --- Main Execution ---
if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    app.run(host='0.0.0.0', port=port, debug=False)
