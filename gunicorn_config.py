import os

# Базовые настройки
bind = f"0.0.0.0:{os.environ.get('PORT', '5050')}"
# Group membership and transcripts are in-memory: one worker per deployment
workers = 1
worker_class = 'uvicorn.workers.UvicornWorker'

# Streaming replies can hold a connection open for a long time
timeout = 120
graceful_timeout = 90
keepalive = 5

# Настройки для логирования
accesslog = '-'
errorlog = '-'
loglevel = os.environ.get('LOG_LEVEL', 'info')


def on_starting(server):
    """Called just before the master process is initialized."""
    server.log.info("Starting Gunicorn server...")


def post_fork(server, worker):
    """Called just after a worker has been forked."""
    server.log.info(f"Worker spawned (pid: {worker.pid})")


def worker_int(worker):
    """Called just after a worker exited on SIGINT or SIGQUIT."""
    worker.log.info(f"Worker interrupted (pid: {worker.pid})")
