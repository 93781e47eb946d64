# wsgi.py  (gunicorn wsgi:app, or `flask --app wsgi run` locally)
from ydkb import create_app

app = create_app()
