# backend/wsgi.py
from rentdesk import create_app

app = create_app()
