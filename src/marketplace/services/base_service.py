# src/marketplace/services/base_service.py

from marketplace.core.context import AppContext


class BaseService:
    """Common wiring for services: every service is built from the request's AppContext."""

    def __init__(self, context: AppContext):
        self.context = context
        self.db = context.db
