"""WSGI entrypoint: ``gunicorn wishlist.wsgi:app``."""

from wishlist import create_app

app = create_app()
