"""Commerce FastAPI application.

Single-domain web server that processes commands synchronously via HTTP.
Payment outcomes arrive on /webhooks/payment, either from the in-process
simulated gateway or from the external payment service (see
``payment_service.py``).

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PAYMENT_GATEWAY selects the adapter:
#   - "simulated" → outcomes resolved on background threads in this process
#   - "http"      → requests sent to PAYMENT_SERVICE_URL, outcomes via webhook
from commerce.api import create_app
from commerce.container import Commerce
from commerce.domain import commerce
from commerce.settings import Settings
from commerce.utils.logging import configure_logging

configure_logging()
commerce.init()

settings = Settings.from_env()
services = Commerce(settings=settings)

app = create_app(services)
