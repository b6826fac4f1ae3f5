"""
FastAPI Todo API package.

Build the application with `todo_api.main.create_app`, or run the bundled
server with `python -m todo_api`.
"""

__version__ = "1.0.0"
