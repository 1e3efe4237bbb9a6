from flask import Flask, jsonify

from quotation.security import init_security


def _secured_app(**config):
    app = Flask(__name__)
    app.config.update(FORCE_HTTPS=False, SESSION_COOKIE_SECURE=False, **config)
    init_security(app)

    @app.get("/ping")
    def ping():
        return jsonify(ok=True)

    return app


def test_headers_lock_down_framing_and_sources():
    r = _secured_app().test_client().get("/ping")
    assert r.status_code == 200
    csp = r.headers["Content-Security-Policy"]
    assert "default-src 'none'" in csp
    assert "frame-ancestors 'none'" in csp
    assert "stripe" not in csp
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "no-referrer"


def test_plain_http_is_redirected_when_https_is_forced():
    r = _secured_app(FORCE_HTTPS=True).test_client().get("/ping")
    assert r.status_code == 302
    assert r.headers["Location"].startswith("https://")
