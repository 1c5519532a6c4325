"""HTTP routers, one module per resource."""

from donation_api.routes import (
    admin,
    auth,
    boutique,
    campaigns,
    donations,
    material_donations,
    users,
)

ALL_ROUTERS = (
    auth.router,
    campaigns.router,
    donations.router,
    material_donations.router,
    boutique.router,
    users.router,
    admin.router,
)

__all__ = ["ALL_ROUTERS"]
