bind = "unix:/var/www/contact-form/gunicorn.sock"
# The rate limiter keeps its state in process memory, so run a single
# worker process and scale with threads.
workers = 1
threads = 8
worker_class = "gthread"
worker_tmp_dir = "/dev/shm"
timeout = 120
keepalive = 5

# Logging
accesslog = "/var/log/contact-form/access.log"
errorlog = "/var/log/contact-form/error.log"
loglevel = "info"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process naming
proc_name = "contact-form"

# Server mechanics
daemon = False
pidfile = "/var/run/contact-form/gunicorn.pid"
user = "deploy"
group = "deploy"
umask = 0o007

# Server hooks
def on_starting(server):
    """Called just before the master process is initialized."""
    server.log.info("Starting Gunicorn server")

def when_ready(server):
    """Called just after the server is started."""
    server.log.info("Gunicorn server is ready. Spawning worker")

def worker_abort(worker):
    """Called when a worker receives the SIGABRT signal."""
    worker.log.info("Worker received SIGABRT signal")
