from flask_talisman import Talisman

# JSON API plus file downloads: nothing here loads scripts, frames or fonts.
API_CSP = {
    "default-src": "'none'",
    "img-src": ["'self'", "data:"],
    "style-src": "'self'",
    "frame-ancestors": "'none'",
    "base-uri": "'none'",
    "form-action": "'self'",
}


def init_security(app):
    """HTTPS redirect, HSTS and a locked-down CSP for staging/production."""
    Talisman(
        app,
        content_security_policy=API_CSP,
        force_https=app.config.get("FORCE_HTTPS", True),
        strict_transport_security=True,
        strict_transport_security_max_age=app.config.get("HSTS_MAX_AGE", 31536000),
        session_cookie_secure=app.config.get("SESSION_COOKIE_SECURE", True),
        frame_options="DENY",
        referrer_policy="no-referrer",
    )
