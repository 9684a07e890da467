# marketplace/wsgi.py
from marketplace.app import create_app

# For gunicorn: gunicorn marketplace.wsgi:app
app = create_app()
