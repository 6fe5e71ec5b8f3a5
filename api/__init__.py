"""api/ -- HTTP layer: FastAPI app, middleware, routes, and the request rate limiter.

Layer rule: api/ may import from auth/ and core/. Nothing imports from api/.
"""
