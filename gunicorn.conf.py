import os

# Bind to the port provided via the PORT environment variable, defaulting to
# 5000.
bind = f"0.0.0.0:{os.getenv('PORT', '5000')}"

# The invoice binder lives in a per-process cache, so run a single worker
# process and serve concurrent requests from its threads.
workers = 1
worker_class = "gthread"
threads = int(os.getenv("GUNICORN_THREADS", "8"))
timeout = 30

wsgi_app = "run:app"
