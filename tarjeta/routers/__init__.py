"""
FastAPI routers grouped by domain (cards, contacts, ghl).

Each file inside this package exposes an APIRouter that is included in the
main application (app.py). Endpoints call services and translate domain
exceptions into HTTP errors.
"""
