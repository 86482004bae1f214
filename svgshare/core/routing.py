from enum import Enum


class RouteClass(str, Enum):
    ASSET = "asset"
    AUTH = "auth"
    PUBLIC_SHARE = "public-share"
    PROTECTED_API = "protected-api"


PUBLIC_SHARE_PREFIXES = ("/api/s/", "/raw/")


def classify_route(path: str) -> RouteClass:
    """Which gate a request path goes through."""
    if path.startswith(PUBLIC_SHARE_PREFIXES):
        return RouteClass.PUBLIC_SHARE
    if path.startswith("/auth/"):
        return RouteClass.AUTH
    if path.startswith("/api/"):
        return RouteClass.PROTECTED_API
    return RouteClass.ASSET
