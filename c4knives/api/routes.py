"""Path table for the HTTP API.

Built once when the app is created. The admin route segment from the config is
inserted after the resource path of every admin-only resource route, e.g. with
ADMIN_API_ROUTE=manage:

    POST   /api/products/manage
    PUT    /api/products/manage/{product_id}
    GET    /api/contact/manage/messages

With an empty segment the admin routes share the public resource paths.
Login and /me always live under {prefix}/admin.
"""

from __future__ import annotations

from dataclasses import dataclass


def _clean(segment: str) -> str:
    return (segment or "").strip().strip("/")


def _join(*parts: str) -> str:
    cleaned = [_clean(p) for p in parts]
    return "/" + "/".join(p for p in cleaned if p)


@dataclass(frozen=True)
class RouteTable:
    health: str

    login: str
    me: str

    products: str
    product: str
    products_admin: str
    product_admin: str

    spotlight: str
    spotlight_admin: str

    testimonials: str
    testimonials_admin: str
    testimonial_admin: str

    contact: str
    contact_messages: str

    metadata: str
    metadata_admin: str


def build_route_table(api_prefix: str = "/api", admin_route: str = "") -> RouteTable:
    api = _clean(api_prefix)
    admin = _clean(admin_route)

    def public(*parts: str) -> str:
        return _join(api, *parts)

    def guarded(resource: str, *rest: str) -> str:
        return _join(api, resource, admin, *rest)

    return RouteTable(
        health=public("health"),
        login=public("admin", "login"),
        me=public("admin", "me"),
        products=public("products"),
        product=public("products", "{product_id}"),
        products_admin=guarded("products"),
        product_admin=guarded("products", "{product_id}"),
        spotlight=public("spotlight"),
        spotlight_admin=guarded("spotlight"),
        testimonials=public("testimonials"),
        testimonials_admin=guarded("testimonials"),
        testimonial_admin=guarded("testimonials", "{testimonial_id}"),
        contact=public("contact"),
        contact_messages=guarded("contact", "messages"),
        metadata=public("metadata"),
        metadata_admin=guarded("metadata"),
    )
