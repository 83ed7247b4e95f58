#!/usr/bin/env python3
"""
Gunicorn configuration for the Foundation Management API
"""

import multiprocessing
import os

# Server socket
bind = f"0.0.0.0:{os.environ.get('PORT', '5000')}"
backlog = 2048

# Worker processes
workers = int(os.environ.get('GUNICORN_WORKERS', multiprocessing.cpu_count() * 2 + 1))
worker_class = "sync"
timeout = 30
keepalive = 2

# Restart workers after this many requests
max_requests = 1000
max_requests_jitter = 100

# Logging: request lines come from the application's access logger
accesslog = None
errorlog = "-"
loglevel = os.environ.get('LOG_LEVEL', 'info').lower()

# Process naming
proc_name = "foundation_admin_api"

# Security
limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190

def on_starting(server):
    server.log.info("Starting Foundation Management API")

def when_ready(server):
    server.log.info("Foundation Management API is ready. Listening on: %s", server.address)

def on_exit(server):
    server.log.info("Shutting down Foundation Management API")
