"""
PawMarket - Orchestrator
Keeps the page state of each signed-in user between requests.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from loguru import logger

from .schemas.profile import AuthenticatedUser
from .utils.backend_client import BackendClient, get_backend
from .views.pets_page import PetsPage
from .views.profile_page import ProfilePage
from .views.services_page import ServicesPage


class Marketplace:
    """
    Holds one set of pages per signed-in user.

    Anonymous visitors get fresh pages on every call, since there is no
    identity to key their state on.
    """

    def __init__(self, backend: Optional[BackendClient] = None):
        """Initialize the orchestrator with an empty session store."""
        logger.info("Initializing PawMarket")
        self.backend = backend or get_backend()
        self.user_sessions: Dict[str, Dict[str, Any]] = {}

    def _session(self, user_id: str) -> Dict[str, Any]:
        if user_id not in self.user_sessions:
            self.user_sessions[user_id] = {
                "created_at": datetime.now(timezone.utc),
                "pets_page": None,
                "services_page": None,
                "profile_page": None,
            }
        return self.user_sessions[user_id]

    def pets_page(self, user_id: Optional[str] = None) -> PetsPage:
        if not user_id:
            return PetsPage(backend=self.backend)

        session = self._session(user_id)
        if session["pets_page"] is None:
            session["pets_page"] = PetsPage(user_id, backend=self.backend)
        return session["pets_page"]

    def services_page(self, user_id: Optional[str] = None) -> ServicesPage:
        if not user_id:
            return ServicesPage(backend=self.backend)

        session = self._session(user_id)
        if session["services_page"] is None:
            session["services_page"] = ServicesPage(user_id, backend=self.backend)
        return session["services_page"]

    def profile_page(self, user: AuthenticatedUser) -> ProfilePage:
        """Profile page for a signed-in user; the identity is refreshed on each call."""
        session = self._session(user.id)
        page = session["profile_page"]
        if page is None:
            page = ProfilePage(user, backend=self.backend)
            session["profile_page"] = page
        else:
            page.user = user
        return page
