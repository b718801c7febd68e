"""CatDonation HTTP layer: FastAPI routers, auth dependencies and response helpers."""
