"""
Development entry point.

Usage:
    python run.py

Serves House of Plants on http://localhost:5000 with DevelopmentConfig.
"""

from houseofplants import create_app

app = create_app()

if __name__ == '__main__':
    app.run(
        host='127.0.0.1',
        port=5000,
        debug=True,
    )
