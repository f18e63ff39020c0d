"""
Gunicorn configuration for production deployment.

Every worker runs its own lifespan, so each worker also schedules the
orphan file sweep; concurrent sweeps are harmless (a file already removed
by another worker is reported as missing, not as an error).
"""
import os

# Server socket
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:5000")
backlog = 2048

# Worker processes
workers = int(os.getenv("GUNICORN_WORKERS", 2))
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 100

# Worker lifecycle
max_requests = 1000  # Restart worker after 1000 requests
max_requests_jitter = 100

# Timeouts (uploads of up to 10MB need some headroom)
timeout = 60
keepalive = 5
graceful_timeout = 30

# Process naming
proc_name = "jobboard_api"

# Server mechanics
daemon = False
pidfile = None
umask = 0
tmp_upload_dir = None

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

wsgi_app = "jobboard.main:app"


# Server hooks
def on_starting(server):
    """Called just before the master process is initialized."""
    server.log.info("Starting Gunicorn server")


def when_ready(server):
    """Called just after the server is started."""
    server.log.info("Gunicorn server is ready. Spawning workers")


def worker_abort(worker):
    """Called when a worker is aborted."""
    worker.log.info("Worker received SIGABRT signal")
