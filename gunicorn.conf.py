# Gunicorn configuration for the WebPoint API
# Admin saves wait on image upload and eight translation calls

# Worker settings
workers = 2
worker_class = 'sync'

# Timeout settings - translation of long articles can take a while
timeout = 120
graceful_timeout = 60
keepalive = 5

# Logging
accesslog = '-'
errorlog = '-'
loglevel = 'info'

# Request handling
max_requests = 1000
max_requests_jitter = 50

# Bind
bind = '0.0.0.0:5000'

# App
wsgi_app = 'webpoint:create_app()'
