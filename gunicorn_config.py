"""
Gunicorn Configuration for Production Deployment
Maintenance shift scheduler

Usage:
    gunicorn --config gunicorn_config.py wsgi:app
"""
import multiprocessing
import os

# Server Socket
bind = os.getenv('GUNICORN_BIND', '0.0.0.0:8000')
backlog = int(os.getenv('GUNICORN_BACKLOG', '2048'))

# Worker Processes
# Requests are synchronous and short; storage calls are bounded by STORAGE_TIMEOUT_SECONDS
workers = int(os.getenv('GUNICORN_WORKERS', multiprocessing.cpu_count() * 2 + 1))
worker_class = os.getenv('GUNICORN_WORKER_CLASS', 'sync')
max_requests = int(os.getenv('GUNICORN_MAX_REQUESTS', '10000'))
max_requests_jitter = int(os.getenv('GUNICORN_MAX_REQUESTS_JITTER', '1000'))
timeout = int(os.getenv('GUNICORN_TIMEOUT', '30'))
keepalive = int(os.getenv('GUNICORN_KEEPALIVE', '5'))

# Server Mechanics
daemon = False
pidfile = os.getenv('GUNICORN_PIDFILE', None)
user = os.getenv('GUNICORN_USER', None)
group = os.getenv('GUNICORN_GROUP', None)

# Logging
accesslog = os.getenv('GUNICORN_ACCESS_LOG', '-')
errorlog = os.getenv('GUNICORN_ERROR_LOG', '-')
loglevel = os.getenv('GUNICORN_LOG_LEVEL', 'info')
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s %(D)s'

# Process Naming
proc_name = 'maintplan'


def on_starting(server):
    """Called just before the master process is initialized."""
    server.log.info("Starting maintenance scheduler")


def when_ready(server):
    """Called just after the server is started."""
    server.log.info("Maintenance scheduler is ready. Listening on: %s", bind)


def worker_abort(worker):
    """Called when a worker receives the SIGABRT signal (usually a timeout)."""
    worker.log.info("Worker received SIGABRT")


# Security
limit_request_line = int(os.getenv('GUNICORN_LIMIT_REQUEST_LINE', '4096'))
limit_request_fields = int(os.getenv('GUNICORN_LIMIT_REQUEST_FIELDS', '100'))

# Graceful Timeout
graceful_timeout = int(os.getenv('GUNICORN_GRACEFUL_TIMEOUT', '30'))

raw_env = [
    f"FLASK_ENV={os.getenv('FLASK_ENV', 'production')}",
]
