# Run with: gunicorn -c gunicorn.conf.py wishlist.wsgi:app
import os

bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
threads = 1
timeout = 60
graceful_timeout = 30
keepalive = 5

# stdout/stderr for the container runtime
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# ProxyFix handles forwarded headers inside the app
forwarded_allow_ips = "*"
proxy_protocol = False
