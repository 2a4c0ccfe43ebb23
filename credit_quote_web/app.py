"""JSON API for the credit quote engine.

Exposes the quote contract over HTTP: one quote per call, the plans matrix
across rate tiers and terms, and the configured rate tiers. Default settings
and tier rates are read from ``CREDIT_QUOTE_*`` environment variables.
"""

import logging
import os

from flask import Flask, jsonify, request

from credit_quote import config
from credit_quote.contract import parse_quote_request, result_to_dict
from credit_quote.engine import compute_quote
from credit_quote.exceptions import InvalidQuoteInput
from credit_quote.matrix import compute_matrix

logger = logging.getLogger(__name__)


def _validation_error(exc: InvalidQuoteInput):
    logger.info(f"Rejected quote request: {exc}")
    body = {"error": {"code": "VALIDATION", "message": "invalid body", "issues": exc.errors}}
    return jsonify(body), 400


def _internal_error():
    body = {"error": {"code": "INTERNAL", "message": "unexpected error"}}
    return jsonify(body), 500


def create_app(environ=None) -> Flask:
    """Build the Flask application.

    ``environ`` defaults to ``os.environ``; tests pass a plain dict.
    """
    environ = os.environ if environ is None else environ
    app = Flask(__name__)
    app.config["TIER_RATES"] = config.tier_rates_from_env(environ)
    app.config["DEFAULT_SETTINGS"] = config.settings_from_env(
        environ, annual_nominal_rate=app.config["TIER_RATES"]["C"]
    )
    app.config["STRICT_TERMS"] = environ.get("CREDIT_QUOTE_STRICT_TERMS", "0") == "1"

    def _parse(term_months=None):
        payload = request.get_json(silent=True)
        if payload is None:
            raise InvalidQuoteInput({"body": "must be a JSON object"})
        return parse_quote_request(
            payload,
            defaults=app.config["DEFAULT_SETTINGS"],
            tier_rates=app.config["TIER_RATES"],
            term_months=term_months,
        )

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.post("/api/quotes/compute")
    def compute():
        try:
            inputs, settings = _parse()
            result = compute_quote(inputs, settings, strict_terms=app.config["STRICT_TERMS"])
        except InvalidQuoteInput as exc:
            return _validation_error(exc)
        except Exception:
            logger.exception("Quote computation failed")
            return _internal_error()
        return jsonify(result_to_dict(result))

    @app.post("/api/quotes/matrix")
    def matrix():
        try:
            payload = request.get_json(silent=True)
            if not isinstance(payload, dict):
                raise InvalidQuoteInput({"body": "must be a JSON object"})
            terms = payload.get("terms") or list(config.SUPPORTED_TERMS)
            if not isinstance(terms, list) or not all(
                isinstance(t, int) and not isinstance(t, bool) for t in terms
            ):
                raise InvalidQuoteInput({"terms": "must be a list of integers"})
            tiers = payload.get("tiers")
            if tiers is not None and not isinstance(tiers, list):
                raise InvalidQuoteInput({"tiers": "must be a list of tier codes"})
            inputs, settings = _parse(term_months=terms[0])
            plans = compute_matrix(
                inputs,
                settings,
                tiers=tiers,
                terms=terms,
                tier_rates=app.config["TIER_RATES"],
                strict_terms=app.config["STRICT_TERMS"],
            )
        except InvalidQuoteInput as exc:
            return _validation_error(exc)
        except Exception:
            logger.exception("Plans matrix computation failed")
            return _internal_error()
        return jsonify(
            {
                tier: {str(term): result_to_dict(result) for term, result in by_term.items()}
                for tier, by_term in plans.items()
            }
        )

    @app.get("/api/rates")
    def rates():
        user_type = request.args.get("userType")
        table = app.config["TIER_RATES"]
        codes = sorted(table)
        # Clients and agencies are only offered the public tiers
        if user_type in ("client", "agency"):
            codes = [code for code in codes if code in config.PUBLIC_TIERS]
        iva = app.config["DEFAULT_SETTINGS"].iva_rate
        return jsonify(
            {
                "success": True,
                "rates": [
                    {
                        "tier_code": code,
                        "annual_rate": float(table[code]),
                        "annual_rate_with_iva": float(table[code] * (1 + iva)),
                    }
                    for code in codes
                ],
            }
        )

    return app


app = create_app()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print("Starting credit quote API...")
    app.run(host="0.0.0.0", port=8710, debug=True)
