try:
    # Import the FastAPI application if possible. If import fails (for example
    # when running seed scripts that only need the DB layer), fall back to
    # None so callers can still import subpackages safely.
    from .main import app  # type: ignore
except Exception:
    app = None

__all__ = ["app"]
