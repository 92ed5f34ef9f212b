from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field

from c4knives import __version__
from c4knives.config import Config, load_config
from c4knives.db import connect, init_db
from c4knives.errors import AppError, ValidationError

from c4knives.auth import bootstrap_admin_if_needed, issue_token, require_admin
from c4knives.store import contact, metadata, products, spotlight, testimonials

from .routes import RouteTable, build_route_table


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


# -----------------------------
# Request bodies
# -----------------------------
# Unknown keys are ignored by pydantic. Update bodies are dumped with
# exclude_unset so only the fields the client sent reach the store.


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class ProductCreate(BaseModel):
    name: str
    description: str
    imageUrl: str
    price: float = Field(0, ge=0)
    tags: List[str] = Field(default_factory=list)
    isCurrentlyAvailable: bool = False
    sequenceId: int = 0


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    imageUrl: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    tags: Optional[List[str]] = None
    isCurrentlyAvailable: Optional[bool] = None
    sequenceId: Optional[int] = None


class SpotlightUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    imageUrl: Optional[str] = None
    videoUrl: Optional[str] = None
    productId: Optional[str] = None


class TestimonialCreate(BaseModel):
    name: str
    role: str
    content: str
    rating: int = Field(..., ge=1, le=5)
    imageUrl: Optional[str] = None


class TestimonialUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    content: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    imageUrl: Optional[str] = None


class ContactRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = None


class MetadataUpdate(BaseModel):
    knifeCounter: Optional[int] = Field(None, ge=0)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    youtube: Optional[str] = None


def _changes(payload: BaseModel) -> Dict[str, Any]:
    return payload.model_dump(exclude_unset=True)


# -----------------------------
# App factory
# -----------------------------


def create_app(cfg: Config | None = None) -> FastAPI:
    """Build the API for `cfg`. The route table is fixed here, at startup."""
    cfg = cfg or load_config()
    routes = build_route_table(cfg.API_PREFIX, cfg.ADMIN_API_ROUTE)

    app = FastAPI(title="C4 Knives API", version=__version__)
    app.state.cfg = cfg
    app.state.routes = routes

    # Must be installed before CORS: middleware added later runs outermost.
    _install_error_handling(app)

    cors_origins = [o.strip() for o in (cfg.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=cfg.CORS_ALLOW_CREDENTIALS,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.on_event("startup")
    def _on_startup() -> None:
        # Ensure schema exists.
        init_db(cfg.DB_DSN)

        # Create the admin account on first boot. A failure here must not stop the server.
        try:
            boot = bootstrap_admin_if_needed(cfg)
        except Exception as e:
            _debug(f"Admin bootstrap failed: {e!r}")
            return
        if boot:
            _debug(f"Bootstrapped initial admin account: username={boot.get('username')}")

    _register_auth_routes(app, cfg, routes)
    _register_product_routes(app, cfg, routes)
    _register_spotlight_routes(app, cfg, routes)
    _register_testimonial_routes(app, cfg, routes)
    _register_contact_routes(app, cfg, routes)
    _register_metadata_routes(app, cfg, routes)

    return app


def _install_error_handling(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError) -> JSONResponse:
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse({"msg": exc.msg}, status_code=exc.status_code, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            {"msg": "Invalid request body", "errors": jsonable_encoder(exc.errors())},
            status_code=400,
        )

    @app.middleware("http")
    async def _server_error(request: Request, call_next: Any) -> Any:
        # Anything that escaped the handlers above is an internal failure.
        try:
            return await call_next(request)
        except Exception as e:
            _debug(f"Unhandled error on {request.method} {request.url.path}: {e!r}")
            return PlainTextResponse("Server Error", status_code=500)


# -----------------------------
# Health + Auth
# -----------------------------


def _register_auth_routes(app: FastAPI, cfg: Config, routes: RouteTable) -> None:
    @app.get(routes.health)
    def health() -> Dict[str, Any]:
        return {"status": "ok"}

    @app.post(routes.login)
    def admin_login(payload: LoginRequest) -> Dict[str, Any]:
        if not payload.username or not payload.password:
            raise ValidationError()

        with connect(cfg.DB_DSN) as conn:
            token, admin = issue_token(conn, cfg, payload.username, payload.password)
        return {"token": token, "admin": admin}

    @app.get(routes.me)
    def admin_me(admin: Dict[str, Any] = Depends(require_admin)) -> Dict[str, Any]:
        return admin


# -----------------------------
# Products
# -----------------------------


def _register_product_routes(app: FastAPI, cfg: Config, routes: RouteTable) -> None:
    @app.get(routes.products)
    def list_products() -> List[Dict[str, Any]]:
        with connect(cfg.DB_DSN) as conn:
            return products.list_products(conn)

    @app.get(routes.product)
    def get_product(product_id: str) -> Dict[str, Any]:
        with connect(cfg.DB_DSN) as conn:
            return products.get_product(conn, product_id)

    @app.post(routes.products_admin)
    def create_product(
        payload: ProductCreate,
        _admin: Dict[str, Any] = Depends(require_admin),
    ) -> Dict[str, Any]:
        with connect(cfg.DB_DSN) as conn:
            return products.create_product(conn, _changes(payload))

    @app.put(routes.product_admin)
    def update_product(
        product_id: str,
        payload: ProductUpdate,
        _admin: Dict[str, Any] = Depends(require_admin),
    ) -> Dict[str, Any]:
        with connect(cfg.DB_DSN) as conn:
            return products.update_product(conn, product_id, _changes(payload))

    @app.delete(routes.product_admin)
    def delete_product(
        product_id: str,
        _admin: Dict[str, Any] = Depends(require_admin),
    ) -> Dict[str, Any]:
        with connect(cfg.DB_DSN) as conn:
            products.delete_product(conn, product_id)
        return {"msg": "Product removed"}


# -----------------------------
# Spotlight
# -----------------------------


def _register_spotlight_routes(app: FastAPI, cfg: Config, routes: RouteTable) -> None:
    @app.get(routes.spotlight)
    def get_spotlight() -> Optional[Dict[str, Any]]:
        # null until the admin writes one
        with connect(cfg.DB_DSN) as conn:
            return spotlight.find_spotlight(conn)

    @app.put(routes.spotlight_admin)
    def update_spotlight(
        payload: SpotlightUpdate,
        _admin: Dict[str, Any] = Depends(require_admin),
    ) -> Dict[str, Any]:
        with connect(cfg.DB_DSN) as conn:
            return spotlight.update_spotlight(conn, _changes(payload))


# -----------------------------
# Testimonials
# -----------------------------


def _register_testimonial_routes(app: FastAPI, cfg: Config, routes: RouteTable) -> None:
    @app.get(routes.testimonials)
    def list_testimonials() -> List[Dict[str, Any]]:
        with connect(cfg.DB_DSN) as conn:
            return testimonials.list_testimonials(conn)

    @app.post(routes.testimonials_admin)
    def create_testimonial(
        payload: TestimonialCreate,
        _admin: Dict[str, Any] = Depends(require_admin),
    ) -> Dict[str, Any]:
        with connect(cfg.DB_DSN) as conn:
            return testimonials.create_testimonial(conn, _changes(payload))

    @app.put(routes.testimonial_admin)
    def update_testimonial(
        testimonial_id: str,
        payload: TestimonialUpdate,
        _admin: Dict[str, Any] = Depends(require_admin),
    ) -> Dict[str, Any]:
        with connect(cfg.DB_DSN) as conn:
            return testimonials.update_testimonial(conn, testimonial_id, _changes(payload))

    @app.delete(routes.testimonial_admin)
    def delete_testimonial(
        testimonial_id: str,
        _admin: Dict[str, Any] = Depends(require_admin),
    ) -> Dict[str, Any]:
        with connect(cfg.DB_DSN) as conn:
            testimonials.delete_testimonial(conn, testimonial_id)
        return {"msg": "Testimonial removed"}


# -----------------------------
# Contact
# -----------------------------


def _register_contact_routes(app: FastAPI, cfg: Config, routes: RouteTable) -> None:
    @app.post(routes.contact)
    def submit_contact(payload: ContactRequest) -> Dict[str, Any]:
        with connect(cfg.DB_DSN) as conn:
            return contact.create_message(conn, _changes(payload))

    @app.get(routes.contact_messages)
    def list_contact_messages(
        _admin: Dict[str, Any] = Depends(require_admin),
    ) -> List[Dict[str, Any]]:
        with connect(cfg.DB_DSN) as conn:
            return contact.list_messages(conn)


# -----------------------------
# Metadata
# -----------------------------


def _register_metadata_routes(app: FastAPI, cfg: Config, routes: RouteTable) -> None:
    @app.get(routes.metadata)
    def get_metadata() -> Dict[str, Any]:
        with connect(cfg.DB_DSN) as conn:
            return metadata.get_or_create_metadata(conn)

    @app.put(routes.metadata_admin)
    def update_metadata(
        payload: MetadataUpdate,
        _admin: Dict[str, Any] = Depends(require_admin),
    ) -> Dict[str, Any]:
        with connect(cfg.DB_DSN) as conn:
            return metadata.update_metadata(conn, _changes(payload))


app = create_app()
