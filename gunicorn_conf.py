import os

# Gunicorn config
wsgi_app = "invite_gate.main:app"
bind = os.environ.get("BIND", "0.0.0.0:8000")
# Each worker owns its own connection pool (DB_POOL_SIZE connections)
workers = int(os.environ.get("WEB_CONCURRENCY", "1"))
worker_class = "uvicorn.workers.UvicornWorker"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"
