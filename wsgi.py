"""
WSGI entry point for production (gunicorn).

Usage:
    gunicorn -c gunicorn.conf.py wsgi:app
"""

import sys

from houseofplants.config import ProductionConfig

# Fail fast with a readable message instead of a traceback.
if not ProductionConfig.SECRET_KEY:
    print(
        'FATAL: SECRET_KEY environment variable is required.\n'
        'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"',
        file=sys.stderr,
    )
    sys.exit(1)

from houseofplants import create_app  # noqa: E402

app = create_app(config_class=ProductionConfig)
