"""
Gunicorn configuration for the Checked API.

Env vars that override defaults:
  PORT     TCP port to bind
  WORKERS  number of worker processes (default: 2)

    gunicorn -c gunicorn.conf.py checked.main:app
"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# SQLite serializes writers; raise this only on Postgres.
workers = int(os.environ.get("WORKERS", "2"))

# Each worker runs Uvicorn's ASGI event loop inside Gunicorn's process manager.
worker_class = "uvicorn.workers.UvicornWorker"

keepalive = 5
timeout = 60

# stdout only; the app's own loggers use the same stream.
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'

graceful_timeout = 30
