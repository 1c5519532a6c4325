"""donation_api -- thin HTTP surface over the donation kernel."""

from donation_api.app import create_app

__all__ = ["create_app"]
