"""
WSGI Entry Point for Production Deployment
Maintenance shift scheduler

Usage with Gunicorn:
    gunicorn --config gunicorn_config.py wsgi:app
"""
import os
import sys
from pathlib import Path

base_dir = Path(__file__).resolve().parent
sys.path.insert(0, str(base_dir))

# Set production environment if not already set
if 'FLASK_ENV' not in os.environ:
    os.environ['FLASK_ENV'] = 'production'

from maintplan import create_app, init_db

app = create_app()

# Schema is normally managed with `flask db upgrade`; create_all only fills gaps
init_db(app)

application = app

if __name__ == "__main__":
    app.run(debug=False, host='0.0.0.0', port=5000)
