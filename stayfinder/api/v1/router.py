"""Version 1 of the public API, mounted under ``settings.api_prefix``."""

from fastapi import APIRouter

from stayfinder.api.v1 import auth, bookings, listings, users

api_router = APIRouter()

for module, prefix, tag in (
    (auth, "/auth", "Authentication"),
    (users, "/users", "Users"),
    (listings, "/listings", "Listings"),
    (bookings, "/bookings", "Bookings"),
):
    api_router.include_router(module.router, prefix=prefix, tags=[tag])
