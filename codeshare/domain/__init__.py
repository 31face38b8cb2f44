"""
Domain Layer

Pure value objects, events, errors and boundary interfaces. Nothing here
depends on the HTTP client, the filesystem or logging.
"""
