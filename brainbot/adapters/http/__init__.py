"""HTTP adapters — clients for the app's own API endpoints."""

from brainbot.adapters.http.app_services import AppServicesClient

__all__ = ["AppServicesClient"]
