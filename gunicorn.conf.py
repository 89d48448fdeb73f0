"""
Gunicorn configuration for production.

Usage:
    gunicorn -c gunicorn.conf.py wsgi:app
"""

import multiprocessing
import os

bind = os.environ.get('GUNICORN_BIND', '0.0.0.0:8000')

# One request per sync worker; bcrypt work blocks only that worker.
workers = int(os.environ.get('GUNICORN_WORKERS', min(multiprocessing.cpu_count() * 2 + 1, 4)))
worker_class = 'sync'

timeout = 30
graceful_timeout = 10
keepalive = 2

max_requests = 1000
max_requests_jitter = 50

limit_request_line = 8190
limit_request_fields = 50
limit_request_field_size = 8190

# Access log without request bodies or cookies.
accesslog = '-'
errorlog = '-'
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" %(L)s'
loglevel = os.environ.get('LOG_LEVEL', 'info')

proc_name = 'houseofplants'

forwarded_allow_ips = os.environ.get('FORWARDED_ALLOW_IPS', '127.0.0.1')
