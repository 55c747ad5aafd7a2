"""
Gunicorn configuration for the Dream Journal API.

Env vars that override defaults:
  PORT           TCP port to bind
  WORKERS        number of worker processes (default: 2)
  WORKER_TIMEOUT seconds before a silent worker is restarted (default: 120)
  LOG_LEVEL      gunicorn log level (default: info)

WORKER_TIMEOUT must stay above AI_TIMEOUT_SECONDS so analysis requests are
not killed mid-call.
"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

workers = int(os.environ.get("WORKERS", "2"))

# Uvicorn's ASGI event loop inside Gunicorn's process manager.
worker_class = "uvicorn.workers.UvicornWorker"

keepalive = 5

# AI calls are bounded at AI_TIMEOUT_SECONDS (60 s by default).
timeout = int(os.environ.get("WORKER_TIMEOUT", "120"))

loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'

graceful_timeout = 30
