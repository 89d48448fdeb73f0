"""
Security response headers, applied to every response.

Scripts and inline styles need the per-request CSP nonce exposed to
templates as csp_nonce. Profile pictures may be served from the image
origins listed in CSP_IMAGE_ORIGINS.
"""

import secrets

from flask import Flask, g, request

STATIC_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'Referrer-Policy': 'strict-origin-when-cross-origin',
    # The map picker asks the browser for the user's position.
    'Permissions-Policy': 'camera=(), microphone=(), geolocation=(self), payment=()',
    'Cross-Origin-Opener-Policy': 'same-origin',
}


def build_csp(nonce: str, image_origins=()) -> str:
    img_src = ' '.join(["'self'", 'data:', *image_origins])
    directives = [
        "default-src 'self'",
        f"script-src 'nonce-{nonce}'",
        f"style-src 'self' 'nonce-{nonce}'",
        f'img-src {img_src}',
        "frame-ancestors 'none'",
        "form-action 'self'",
        "base-uri 'self'",
        "object-src 'none'",
    ]
    return '; '.join(directives)


def init_security_headers(app: Flask) -> None:
    """Register the nonce and header hooks on the app."""

    @app.before_request
    def set_csp_nonce() -> None:
        g.csp_nonce = secrets.token_urlsafe(32)

    @app.context_processor
    def inject_csp_nonce() -> dict:
        return {'csp_nonce': g.get('csp_nonce', '')}

    @app.after_request
    def set_security_headers(response):
        response.headers['Content-Security-Policy'] = build_csp(
            g.get('csp_nonce', ''),
            app.config.get('CSP_IMAGE_ORIGINS', ()),
        )
        response.headers.update(STATIC_HEADERS)

        if not app.debug:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        # Pages show who is logged in; a shared browser must not replay them.
        if not request.path.startswith('/static/'):
            response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate, max-age=0'
            response.headers['Pragma'] = 'no-cache'

        response.headers.pop('Server', None)
        return response
