"""
Gunicorn configuration for the SAFE-8 assessment API.

Usage:
    gunicorn app.main:app -c gunicorn.conf.py

PORT, WEB_CONCURRENCY and GUNICORN_TIMEOUT override the defaults below.
"""

import multiprocessing
import os

bind = f"0.0.0.0:{os.getenv('PORT', '8000')}"

# PDF rendering is CPU-bound; default to one worker per core plus one
workers = int(os.getenv("WEB_CONCURRENCY", multiprocessing.cpu_count() + 1))

worker_class = "uvicorn.workers.UvicornWorker"

# Submit may render a report and talk to SMTP before responding
timeout = int(os.getenv("GUNICORN_TIMEOUT", "60"))
graceful_timeout = 30
keepalive = 5

accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info")
