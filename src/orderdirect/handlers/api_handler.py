"""FastAPI application for the storefront, cart, signup, customer and admin endpoints."""

import logging
from collections.abc import Callable
from decimal import Decimal
from typing import Annotated, Any, ClassVar

from fastapi import Depends, FastAPI, Header, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field, model_validator

from orderdirect.auth.api_dependencies import get_bearer_token
from orderdirect.cart.persistence import CartPersistenceAdapter, KeyValueStore
from orderdirect.cart.pricing import DELIVERY_FEE
from orderdirect.cart.session import CartSession
from orderdirect.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DuplicateCategoryError,
    EmptyCartError,
    IdentityProviderError,
    OrderDirectError,
    OrderStatusTransitionError,
    SignupValidationError,
    StoreUnavailableError,
    SubdomainUnavailableError,
)
from orderdirect.models.cart_models import AddOnOption, Cart, CartTotals
from orderdirect.models.customer_models import CustomerProfile
from orderdirect.models.menu_models import Category, MenuItem
from orderdirect.models.order_models import Order
from orderdirect.models.tenant_models import Restaurant, UserProfile
from orderdirect.services.customer_service import CustomerService
from orderdirect.services.menu_service import MenuService
from orderdirect.services.order_service import OrderService
from orderdirect.services.signup_service import SignupService
from orderdirect.tenancy.resolver import TenantNotFound, TenantResolver
from orderdirect.tenancy.session_guard import AdminSession, ScopedSessionGuard

logger = logging.getLogger(__name__)

CART_SESSION_HEADER = "X-Cart-Session"

ERROR_STATUS_CODES: dict[type[OrderDirectError], int] = {
    StoreUnavailableError: 503,
    IdentityProviderError: 503,
    AuthenticationError: 401,
    AuthorizationError: 403,
    SubdomainUnavailableError: 409,
    SignupValidationError: 400,
    DuplicateCategoryError: 409,
    EmptyCartError: 400,
    OrderStatusTransitionError: 409,
}


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class SubdomainAvailabilityResponse(BaseModel):
    subdomain: str
    available: bool


class SignupRequest(BaseModel):
    """Restaurant signup form."""

    restaurant_name: str = Field(..., min_length=1)
    owner_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = ""
    subdomain: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class SignupResponse(BaseModel):
    user_id: str
    subdomain: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Session handed to an owner after login."""

    access_token: str
    user_id: str
    restaurant_id: str
    subdomain: str


class StorefrontResponse(BaseModel):
    """Public view of a restaurant."""

    id: str
    name: str
    subdomain: str
    phone: str


class MenuSectionResponse(BaseModel):
    category: Category | None
    items: list[MenuItem]


class MenuResponse(BaseModel):
    restaurant_id: str
    restaurant_name: str
    sections: list[MenuSectionResponse]


class CartLineResponse(BaseModel):
    menu_item_id: str
    name: str
    price: Decimal
    quantity: int
    unit_price: Decimal
    special_instructions: str | None = None
    selected_add_ons: list[AddOnOption] = []


class CartResponse(BaseModel):
    """A cart together with its derived prices."""

    restaurant_id: str | None
    restaurant_name: str | None
    items: list[CartLineResponse]
    item_count: int
    subtotal: Decimal
    delivery_fee: Decimal
    taxes: Decimal
    total: Decimal

    @classmethod
    def from_cart(cls, cart: Cart, totals: CartTotals, item_count: int) -> "CartResponse":
        return cls(
            restaurant_id=cart.restaurant_id,
            restaurant_name=cart.restaurant_name,
            items=[
                CartLineResponse(
                    menu_item_id=line.menu_item.id,
                    name=line.menu_item.name,
                    price=line.menu_item.price,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    special_instructions=line.special_instructions,
                    selected_add_ons=list(line.selected_add_ons),
                )
                for line in cart.items
            ],
            item_count=item_count,
            subtotal=totals.subtotal,
            delivery_fee=totals.delivery_fee,
            taxes=totals.taxes,
            total=totals.total,
        )


class AddCartItemRequest(BaseModel):
    menu_item_id: str = Field(..., min_length=1)
    selected_add_ons: list[AddOnOption] = []


class UpdateCartItemRequest(BaseModel):
    """Quantity and/or instructions for one cart line. Quantity 0 removes the line."""

    quantity: int | None = None
    special_instructions: str | None = None


class CheckoutRequest(BaseModel):
    customer_name: str = Field(..., min_length=1)
    customer_email: EmailStr | None = None
    customer_phone: str | None = None
    special_instructions: str | None = None


class MenuItemCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    price: Decimal = Field(..., gt=0)
    category: str = ""
    image_url: str | None = None
    available: bool = True


class PartialUpdateRequest(BaseModel):
    """Body of a PATCH request.

    Omitted fields are left alone. An explicit null is only accepted for the
    fields listed in nullable_fields; everywhere else it is a validation error.
    """

    nullable_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_nulls(self) -> "PartialUpdateRequest":
        for field in sorted(self.model_fields_set - self.nullable_fields):
            if getattr(self, field) is None:
                raise ValueError(f"{field} may not be null")
        return self

    def updates(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class MenuItemUpdateRequest(PartialUpdateRequest):
    nullable_fields: ClassVar[frozenset[str]] = frozenset({"image_url"})

    name: str | None = Field(None, min_length=1)
    description: str | None = None
    price: Decimal | None = Field(None, gt=0)
    category: str | None = None
    image_url: str | None = None
    available: bool | None = None


class AvailabilityRequest(BaseModel):
    available: bool


class CategoryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    description: str | None = None
    display_order: int = 0


class CategoryUpdateRequest(PartialUpdateRequest):
    nullable_fields: ClassVar[frozenset[str]] = frozenset({"description"})

    description: str | None = None
    display_order: int | None = None


class CategoryRenameRequest(BaseModel):
    name: str = Field(..., min_length=1)


class CategoryRenameResponse(BaseModel):
    """Outcome of a category rename and its item rewrites."""

    category_id: str
    old_name: str
    new_name: str
    updated: int
    failed: int
    renamed: bool


class CustomerSignupRequest(BaseModel):
    """Customer account form. Name and phone are required at signup."""

    email: EmailStr
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)


class CustomerLoginResponse(BaseModel):
    access_token: str
    customer: CustomerProfile


class CustomerProfileUpdateRequest(PartialUpdateRequest):
    name: str | None = Field(None, min_length=1)
    phone: str | None = Field(None, min_length=1)


class AddressRequest(BaseModel):
    label: str = Field(..., min_length=1)
    street: str = Field(..., min_length=1)
    apartment: str | None = None
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    landmark: str | None = None
    is_default: bool = False


class AddressUpdateRequest(PartialUpdateRequest):
    nullable_fields: ClassVar[frozenset[str]] = frozenset({"apartment", "landmark"})

    label: str | None = Field(None, min_length=1)
    street: str | None = Field(None, min_length=1)
    apartment: str | None = None
    city: str | None = Field(None, min_length=1)
    state: str | None = Field(None, min_length=1)
    zip_code: str | None = Field(None, min_length=1)
    landmark: str | None = None
    is_default: bool | None = None


def create_app(
    signup_service: SignupService,
    menu_service: MenuService,
    order_service: OrderService,
    customer_service: CustomerService,
    tenant_resolver: TenantResolver,
    session_guard: ScopedSessionGuard,
    cart_store_factory: Callable[[str], KeyValueStore],
    delivery_fee: Decimal = DELIVERY_FEE,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        signup_service: Service for signup and owner login
        menu_service: Service for menu items and categories
        order_service: Service for checkout and order status
        customer_service: Service for customer accounts and addresses
        tenant_resolver: Resolver mapping subdomains to restaurants
        session_guard: Guard for admin endpoints
        cart_store_factory: Builds the key-value store for a cart session id
        delivery_fee: Flat delivery fee applied to non-empty carts

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="OrderDirect API",
        description="Multi-tenant restaurant storefronts, carts and admin dashboards",
        version="1.0.0",
    )

    app.state.signup_service = signup_service
    app.state.menu_service = menu_service
    app.state.order_service = order_service
    app.state.customer_service = customer_service
    app.state.tenant_resolver = tenant_resolver
    app.state.session_guard = session_guard
    app.state.cart_store_factory = cart_store_factory
    app.state.delivery_fee = delivery_fee

    @app.exception_handler(OrderDirectError)
    async def handle_service_error(request: Request, exc: OrderDirectError) -> JSONResponse:
        status_code = next(
            (ERROR_STATUS_CODES[cls] for cls in type(exc).__mro__ if cls in ERROR_STATUS_CODES),
            500,
        )
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    async def resolve_restaurant(subdomain: str) -> Restaurant:
        """Dependency resolving the route's subdomain to a restaurant."""
        resolution = await app.state.tenant_resolver.resolve(subdomain)
        if isinstance(resolution, TenantNotFound):
            raise HTTPException(status_code=404, detail="Restaurant not found")
        restaurant: Restaurant = resolution.restaurant
        return restaurant

    async def require_admin(
        restaurant: Annotated[Restaurant, Depends(resolve_restaurant)],
        access_token: Annotated[str, Depends(get_bearer_token)],
    ) -> UserProfile:
        """Dependency admitting only principals of the route's restaurant."""
        profile: UserProfile = await app.state.session_guard.authorize(access_token, restaurant)
        return profile

    def get_cart_session(
        x_cart_session: Annotated[str | None, Header()] = None,
    ) -> CartSession:
        """Dependency loading the caller's cart."""
        if not x_cart_session:
            raise HTTPException(status_code=400, detail=f"Missing {CART_SESSION_HEADER} header")
        store = app.state.cart_store_factory(x_cart_session)
        return CartSession(CartPersistenceAdapter(store), delivery_fee=app.state.delivery_fee)

    async def require_customer(
        access_token: Annotated[str, Depends(get_bearer_token)],
    ) -> CustomerProfile:
        """Dependency resolving the bearer token to a customer profile."""
        customer: CustomerProfile = await app.state.customer_service.authenticate(access_token)
        return customer

    RestaurantDep = Annotated[Restaurant, Depends(resolve_restaurant)]
    AdminDep = Annotated[UserProfile, Depends(require_admin)]
    CartDep = Annotated[CartSession, Depends(get_cart_session)]
    CustomerDep = Annotated[CustomerProfile, Depends(require_customer)]

    def cart_response(session: CartSession) -> CartResponse:
        return CartResponse.from_cart(session.cart, session.totals, session.item_count)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy")

    # Signup and login

    @app.get(
        "/signup/subdomain-availability/{subdomain}",
        response_model=SubdomainAvailabilityResponse,
        tags=["Signup"],
    )
    async def check_subdomain(subdomain: str) -> SubdomainAvailabilityResponse:
        available = await app.state.signup_service.check_subdomain_availability(subdomain)
        return SubdomainAvailabilityResponse(subdomain=subdomain.strip().lower(), available=available)

    @app.post("/signup", response_model=SignupResponse, status_code=201, tags=["Signup"])
    async def signup(request: SignupRequest) -> SignupResponse:
        """Create an owner account and its restaurant."""
        result = await app.state.signup_service.signup_restaurant(
            restaurant_name=request.restaurant_name,
            owner_name=request.owner_name,
            email=str(request.email),
            phone=request.phone,
            subdomain=request.subdomain,
            password=request.password,
        )
        return SignupResponse(user_id=result.user_id, subdomain=result.subdomain)

    @app.post("/login", response_model=LoginResponse, tags=["Signup"])
    async def login(request: LoginRequest) -> LoginResponse:
        """Log an owner in and tell them which dashboard is theirs."""
        result = await app.state.signup_service.login(str(request.email), request.password)
        return LoginResponse(
            access_token=result.principal.access_token or "",
            user_id=result.principal.user_id,
            restaurant_id=result.restaurant.id,
            subdomain=result.restaurant.subdomain,
        )

    # Customer accounts

    @app.post(
        "/customers/signup", response_model=CustomerProfile, status_code=201, tags=["Customers"]
    )
    async def customer_signup(request: CustomerSignupRequest) -> CustomerProfile:
        customer: CustomerProfile = await app.state.customer_service.sign_up(
            email=str(request.email),
            password=request.password,
            name=request.name,
            phone=request.phone,
        )
        return customer

    @app.post("/customers/login", response_model=CustomerLoginResponse, tags=["Customers"])
    async def customer_login(request: LoginRequest) -> CustomerLoginResponse:
        result = await app.state.customer_service.sign_in(str(request.email), request.password)
        return CustomerLoginResponse(
            access_token=result.principal.access_token or "", customer=result.customer
        )

    @app.post("/customers/logout", status_code=204, tags=["Customers"])
    async def customer_logout(
        _customer: CustomerDep, access_token: Annotated[str, Depends(get_bearer_token)]
    ) -> Response:
        await app.state.customer_service.sign_out(access_token)
        return Response(status_code=204)

    @app.get("/customers/me", response_model=CustomerProfile, tags=["Customers"])
    async def get_customer(customer: CustomerDep) -> CustomerProfile:
        return customer

    @app.patch("/customers/me", response_model=CustomerProfile, tags=["Customers"])
    async def update_customer(
        customer: CustomerDep, request: CustomerProfileUpdateRequest
    ) -> CustomerProfile:
        updated = await app.state.customer_service.update_profile(customer.id, request.updates())
        if updated is None:
            raise HTTPException(status_code=404, detail="Customer not found")
        return updated

    @app.post(
        "/customers/me/addresses",
        response_model=CustomerProfile,
        status_code=201,
        tags=["Customers"],
    )
    async def add_address(customer: CustomerDep, request: AddressRequest) -> CustomerProfile:
        """Save a delivery address. The first saved address becomes the default."""
        updated = await app.state.customer_service.add_address(customer.id, **request.model_dump())
        if updated is None:
            raise HTTPException(status_code=404, detail="Customer not found")
        return updated

    @app.patch(
        "/customers/me/addresses/{address_id}", response_model=CustomerProfile, tags=["Customers"]
    )
    async def update_address(
        customer: CustomerDep, address_id: str, request: AddressUpdateRequest
    ) -> CustomerProfile:
        updated = await app.state.customer_service.update_address(
            customer.id, address_id, request.updates()
        )
        if updated is None:
            raise HTTPException(status_code=404, detail="Address not found")
        return updated

    @app.delete(
        "/customers/me/addresses/{address_id}", response_model=CustomerProfile, tags=["Customers"]
    )
    async def delete_address(customer: CustomerDep, address_id: str) -> CustomerProfile:
        updated = await app.state.customer_service.delete_address(customer.id, address_id)
        if updated is None:
            raise HTTPException(status_code=404, detail="Address not found")
        return updated

    # Storefront

    @app.get("/{subdomain}", response_model=StorefrontResponse, tags=["Storefront"])
    async def get_storefront(restaurant: RestaurantDep) -> StorefrontResponse:
        return StorefrontResponse(
            id=restaurant.id,
            name=restaurant.name,
            subdomain=restaurant.subdomain,
            phone=restaurant.phone,
        )

    @app.get("/{subdomain}/menu", response_model=MenuResponse, tags=["Storefront"])
    async def get_menu(restaurant: RestaurantDep) -> MenuResponse:
        """Available items grouped by category."""
        sections = await app.state.menu_service.get_customer_menu(restaurant.id)
        return MenuResponse(
            restaurant_id=restaurant.id,
            restaurant_name=restaurant.name,
            sections=[MenuSectionResponse(category=s.category, items=s.items) for s in sections],
        )

    @app.get("/{subdomain}/orders/{order_id}", response_model=Order, tags=["Storefront"])
    async def track_order(restaurant: RestaurantDep, order_id: str) -> Order:
        order: Order | None = await app.state.order_service.get_order(restaurant.id, order_id)
        if order is None:
            raise HTTPException(status_code=404, detail="Order not found")
        return order

    # Cart

    @app.get("/{subdomain}/cart", response_model=CartResponse, tags=["Cart"])
    async def get_cart(restaurant: RestaurantDep, session: CartDep) -> CartResponse:
        return cart_response(session)

    @app.post("/{subdomain}/cart/items", response_model=CartResponse, tags=["Cart"])
    async def add_cart_item(
        restaurant: RestaurantDep, session: CartDep, request: AddCartItemRequest
    ) -> CartResponse:
        """Add one unit of a menu item.

        Adding an item from another restaurant replaces the whole cart.
        """
        item: MenuItem | None = await app.state.menu_service.get_menu_item(
            restaurant.id, request.menu_item_id
        )
        if item is None:
            raise HTTPException(status_code=404, detail="Menu item not found")
        if not item.available:
            raise HTTPException(status_code=409, detail=f"{item.name} is not available")

        session.add_item(item, restaurant.id, restaurant.name, request.selected_add_ons)
        return cart_response(session)

    @app.patch("/{subdomain}/cart/items/{menu_item_id}", response_model=CartResponse, tags=["Cart"])
    async def update_cart_item(
        restaurant: RestaurantDep,
        session: CartDep,
        menu_item_id: str,
        request: UpdateCartItemRequest,
    ) -> CartResponse:
        if not any(line.menu_item.id == menu_item_id for line in session.cart.items):
            raise HTTPException(status_code=404, detail="Item is not in the cart")

        if request.special_instructions is not None:
            session.set_instructions(menu_item_id, request.special_instructions)
        if request.quantity is not None:
            session.set_quantity(menu_item_id, request.quantity)
        return cart_response(session)

    @app.delete(
        "/{subdomain}/cart/items/{menu_item_id}", response_model=CartResponse, tags=["Cart"]
    )
    async def remove_cart_item(
        restaurant: RestaurantDep, session: CartDep, menu_item_id: str
    ) -> CartResponse:
        session.remove_item(menu_item_id)
        return cart_response(session)

    @app.delete("/{subdomain}/cart", response_model=CartResponse, tags=["Cart"])
    async def clear_cart(restaurant: RestaurantDep, session: CartDep) -> CartResponse:
        session.clear()
        return cart_response(session)

    @app.post("/{subdomain}/checkout", response_model=Order, status_code=201, tags=["Cart"])
    async def checkout(
        restaurant: RestaurantDep, session: CartDep, request: CheckoutRequest
    ) -> Order:
        """Place an order from the cart and clear the cart."""
        order: Order = await app.state.order_service.place_order(
            restaurant=restaurant,
            cart_session=session,
            customer_name=request.customer_name,
            customer_email=str(request.customer_email) if request.customer_email else None,
            customer_phone=request.customer_phone,
            special_instructions=request.special_instructions,
        )
        return order

    # Admin session

    @app.post("/{subdomain}/admin/login", response_model=LoginResponse, tags=["Admin"])
    async def admin_login(restaurant: RestaurantDep, request: LoginRequest) -> LoginResponse:
        """Sign in to one restaurant's dashboard.

        Principals of other restaurants are rejected with 403 and signed out.
        """
        guard: ScopedSessionGuard = app.state.session_guard
        admin_session = AdminSession(restaurant, guard.identity_provider, guard.profile_repository)
        try:
            await admin_session.sign_in(str(request.email), request.password)
        finally:
            admin_session.close()

        if not admin_session.is_authorized or admin_session.principal is None:
            status_code = 403 if admin_session.denied else 401
            raise HTTPException(status_code=status_code, detail=admin_session.error)

        return LoginResponse(
            access_token=admin_session.principal.access_token or "",
            user_id=admin_session.principal.user_id,
            restaurant_id=restaurant.id,
            subdomain=restaurant.subdomain,
        )

    @app.post("/{subdomain}/admin/logout", status_code=204, tags=["Admin"])
    async def admin_logout(
        _profile: AdminDep, access_token: Annotated[str, Depends(get_bearer_token)]
    ) -> Response:
        app.state.session_guard.identity_provider.sign_out(access_token)
        return Response(status_code=204)

    # Admin menu items

    @app.get("/{subdomain}/admin/menu-items", response_model=list[MenuItem], tags=["Admin"])
    async def list_menu_items(restaurant: RestaurantDep, _profile: AdminDep) -> list[MenuItem]:
        items: list[MenuItem] = await app.state.menu_service.list_menu_items(restaurant.id)
        return items

    @app.post(
        "/{subdomain}/admin/menu-items",
        response_model=MenuItem,
        status_code=201,
        tags=["Admin"],
    )
    async def create_menu_item(
        restaurant: RestaurantDep, _profile: AdminDep, request: MenuItemCreateRequest
    ) -> MenuItem:
        item: MenuItem = await app.state.menu_service.add_menu_item(
            restaurant_id=restaurant.id, **request.model_dump()
        )
        return item

    @app.patch(
        "/{subdomain}/admin/menu-items/{item_id}", response_model=MenuItem, tags=["Admin"]
    )
    async def update_menu_item(
        restaurant: RestaurantDep,
        _profile: AdminDep,
        item_id: str,
        request: MenuItemUpdateRequest,
    ) -> MenuItem:
        item = await app.state.menu_service.update_menu_item(
            restaurant.id, item_id, request.updates()
        )
        if item is None:
            raise HTTPException(status_code=404, detail="Menu item not found")
        return item

    @app.post(
        "/{subdomain}/admin/menu-items/{item_id}/availability",
        response_model=MenuItem,
        tags=["Admin"],
    )
    async def set_menu_item_availability(
        restaurant: RestaurantDep,
        _profile: AdminDep,
        item_id: str,
        request: AvailabilityRequest,
    ) -> MenuItem:
        item = await app.state.menu_service.set_availability(
            restaurant.id, item_id, request.available
        )
        if item is None:
            raise HTTPException(status_code=404, detail="Menu item not found")
        return item

    @app.delete("/{subdomain}/admin/menu-items/{item_id}", status_code=204, tags=["Admin"])
    async def delete_menu_item(
        restaurant: RestaurantDep, _profile: AdminDep, item_id: str
    ) -> Response:
        if not await app.state.menu_service.delete_menu_item(restaurant.id, item_id):
            raise HTTPException(status_code=404, detail="Menu item not found")
        return Response(status_code=204)

    # Admin categories

    @app.get("/{subdomain}/admin/categories", response_model=list[Category], tags=["Admin"])
    async def list_categories(restaurant: RestaurantDep, _profile: AdminDep) -> list[Category]:
        categories: list[Category] = await app.state.menu_service.list_categories(restaurant.id)
        return categories

    @app.post(
        "/{subdomain}/admin/categories",
        response_model=Category,
        status_code=201,
        tags=["Admin"],
    )
    async def create_category(
        restaurant: RestaurantDep, _profile: AdminDep, request: CategoryCreateRequest
    ) -> Category:
        category: Category = await app.state.menu_service.add_category(
            restaurant_id=restaurant.id, **request.model_dump()
        )
        return category

    @app.patch(
        "/{subdomain}/admin/categories/{category_id}", response_model=Category, tags=["Admin"]
    )
    async def update_category(
        restaurant: RestaurantDep,
        _profile: AdminDep,
        category_id: str,
        request: CategoryUpdateRequest,
    ) -> Category:
        category = await app.state.menu_service.update_category(
            restaurant.id, category_id, request.updates()
        )
        if category is None:
            raise HTTPException(status_code=404, detail="Category not found")
        return category

    @app.post(
        "/{subdomain}/admin/categories/{category_id}/rename",
        response_model=CategoryRenameResponse,
        tags=["Admin"],
    )
    async def rename_category(
        restaurant: RestaurantDep,
        _profile: AdminDep,
        category_id: str,
        request: CategoryRenameRequest,
    ) -> CategoryRenameResponse | JSONResponse:
        """Rename a category and move its items to the new name.

        Returns 207 when some items could not be rewritten; repeating the
        request finishes the rename.
        """
        result = await app.state.menu_service.rename_category(
            restaurant.id, category_id, request.name
        )
        if result is None:
            raise HTTPException(status_code=404, detail="Category not found")

        response = CategoryRenameResponse(
            category_id=result.category_id,
            old_name=result.old_name,
            new_name=result.new_name,
            updated=result.updated,
            failed=result.failed,
            renamed=result.renamed,
        )
        if not result.complete:
            return JSONResponse(status_code=207, content=response.model_dump())
        return response

    @app.delete("/{subdomain}/admin/categories/{category_id}", status_code=204, tags=["Admin"])
    async def delete_category(
        restaurant: RestaurantDep, _profile: AdminDep, category_id: str
    ) -> Response:
        if not await app.state.menu_service.delete_category(restaurant.id, category_id):
            raise HTTPException(status_code=404, detail="Category not found")
        return Response(status_code=204)

    # Admin orders

    @app.get("/{subdomain}/admin/orders", response_model=list[Order], tags=["Admin"])
    async def list_orders(restaurant: RestaurantDep, _profile: AdminDep) -> list[Order]:
        orders: list[Order] = await app.state.order_service.list_orders(restaurant.id)
        return orders

    @app.post(
        "/{subdomain}/admin/orders/{order_id}/close", response_model=Order, tags=["Admin"]
    )
    async def close_order(
        restaurant: RestaurantDep, _profile: AdminDep, order_id: str
    ) -> Order:
        order = await app.state.order_service.close_order(restaurant.id, order_id)
        if order is None:
            raise HTTPException(status_code=404, detail="Order not found")
        return order

    return app
