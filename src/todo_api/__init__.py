"""
FastAPI Todo Backend package.

The ASGI application lives in `todo_api.main` (`todo_api.main:app`);
`todo_api.main.create_app` builds additional instances, e.g. for tests.
"""
