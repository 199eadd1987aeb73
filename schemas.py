from pydantic import BaseModel, EmailStr, Field, HttpUrl
from typing import Optional, List, Dict
from datetime import datetime

PHONE_PATTERN = r"^\+?[0-9 ()\-]{7,20}$"

# --- Token / Auth ---
class TokenClaims(BaseModel):
    user_id: int
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None

class LoginRequest(BaseModel):
    email: str
    password: str

# --- User ---
class UserOut(BaseModel):
    user_id: int
    username: str
    phone_number: str
    email: str

class LoginResponse(BaseModel):
    success: bool = True
    message: str = "Login successful"
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "Bearer"
    expires_in: int
    user: UserOut

class UserRegister(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    phone_number: str = Field(..., pattern=PHONE_PATTERN)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)

class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, max_length=50)
    # Empty strings mean "leave unchanged"
    phone_number: Optional[str] = Field(None, pattern=r"^$|" + PHONE_PATTERN)

class ProfileAddress(BaseModel):
    address_id: int
    street_address: str
    city: str
    state: str
    zip_code: str
    is_default: bool

class ProfileOrder(BaseModel):
    order_id: int
    order_date: datetime
    total_amount: float
    status: str

class UserProfile(UserOut):
    is_active: bool
    addresses: List[ProfileAddress] = []
    orders: List[ProfileOrder] = []

# --- Category ---
class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    icon_url: HttpUrl

class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    icon_url: Optional[HttpUrl] = None

class CategoryOut(BaseModel):
    category_id: int
    name: str
    icon_url: str
    product_count: int

class CategoryProductCount(BaseModel):
    category_id: int
    category_name: str
    product_count: int
    has_products: bool

# --- Food item ---
class FoodItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    category_id: int = Field(..., ge=1)
    price: float = Field(..., ge=0.01, le=9999999.99)
    image_url: Optional[HttpUrl] = None
    stock_quantity: int = Field(..., ge=0)

class FoodItemUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    category_id: Optional[int] = Field(None, ge=1)
    price: Optional[float] = Field(None, ge=0.01, le=9999999.99)
    image_url: Optional[HttpUrl] = None
    stock_quantity: Optional[int] = Field(None, ge=0)

class FoodItemOut(BaseModel):
    food_item_id: int
    name: str
    description: str
    category_id: int
    category_name: Optional[str] = None
    price: float
    image_url: Optional[str] = None
    stock_quantity: int
    is_available: bool

class FoodItemPage(BaseModel):
    items: List[FoodItemOut]
    total_count: int
    page_number: int
    page_size: int
    total_pages: int

class FoodItemSearchPage(FoodItemPage):
    search_term: str

# --- Cart ---
class AddToCart(BaseModel):
    food_item_id: int = Field(..., ge=1)
    quantity: int = Field(..., ge=1)

class UpdateCartItem(BaseModel):
    quantity: int = Field(..., ge=1)

class CartItemOut(BaseModel):
    cart_item_id: int
    food_item_id: int
    product_name: str
    price: float
    quantity: int
    image_url: Optional[str] = None
    line_total: float

class CartOut(BaseModel):
    cart_id: int
    user_id: int
    last_updated: datetime
    cart_items: List[CartItemOut] = []
    total_items: int
    cart_total: float
    is_empty: bool

class CartSummary(BaseModel):
    total_items: int
    cart_total: float
    item_count: int
    is_empty: bool

# --- Order ---
class OrderCreate(BaseModel):
    shipping_address: str = Field(..., max_length=500)
    special_instructions: Optional[str] = Field(None, max_length=1000)

class OrderStatusUpdate(BaseModel):
    status: str = Field(..., max_length=50)

class OrderItemOut(BaseModel):
    order_item_id: int
    food_item_id: int
    product_name: str
    quantity: int
    unit_price: float
    line_total: float

class OrderOut(BaseModel):
    order_id: int
    user_id: int
    order_date: datetime
    total_amount: float
    status: str
    shipping_address: Optional[str] = None
    special_instructions: Optional[str] = None
    order_items: List[OrderItemOut] = []
    item_count: int
    total_quantity: int

class OrderPage(BaseModel):
    orders: List[OrderOut]
    total_count: int
    page_number: int
    page_size: int
    total_pages: int

class OrderSummary(BaseModel):
    order_id: int
    order_date: datetime
    total_amount: float
    status: str
    item_count: int
    shipping_address: Optional[str] = None

# --- Address ---
class AddressCreate(BaseModel):
    street_address: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=50)
    zip_code: str = Field(..., min_length=1, max_length=20)
    is_default: bool = False

class AddressUpdate(BaseModel):
    street_address: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    zip_code: Optional[str] = Field(None, max_length=20)
    is_default: Optional[bool] = None

class AddressOut(BaseModel):
    address_id: int
    user_id: int
    street_address: str
    city: str
    state: str
    zip_code: str
    is_default: bool
    full_address: str

# --- Review ---
class ReviewCreate(BaseModel):
    food_item_id: int = Field(..., ge=1)
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=1000)

class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=1000)

class ReviewOut(BaseModel):
    review_id: int
    food_item_id: int
    product_name: str
    user_id: int
    reviewer_name: str
    rating: int
    comment: Optional[str] = None
    created_date: datetime
    updated_date: Optional[datetime] = None
    can_edit: bool
    can_delete: bool

class ProductReviewPage(BaseModel):
    reviews: List[ReviewOut]
    total_count: int
    page_number: int
    page_size: int
    total_pages: int
    average_rating: float

class ReviewPage(BaseModel):
    reviews: List[ReviewOut]
    total_count: int
    page_number: int
    page_size: int
    total_pages: int

class AverageRating(BaseModel):
    product_id: int
    product_name: str
    average_rating: float
    review_count: int
    has_reviews: bool

class RatingCount(BaseModel):
    rating: int
    count: int

class ReviewedProduct(BaseModel):
    product_id: int
    product_name: str
    review_count: int
    average_rating: float

class ReviewStatistics(BaseModel):
    total_reviews: int
    average_rating: float
    rating_distribution: List[RatingCount]
    top_reviewed_products: List[ReviewedProduct]

# --- Wishlist ---
class AddToWishlist(BaseModel):
    food_item_id: int = Field(..., ge=1)

class WishlistItemOut(BaseModel):
    wishlist_item_id: int
    food_item_id: int
    product_name: str
    price: float
    description: str
    image_url: Optional[str] = None
    stock_quantity: int
    is_available: bool
    added_date: datetime

class WishlistOut(BaseModel):
    wishlist_id: int
    user_id: int
    created_date: datetime
    last_updated_date: datetime
    items: List[WishlistItemOut] = []
    item_count: int
    total_value: float
    available_item_count: int

# --- Admin dashboard ---
class DashboardStatistics(BaseModel):
    total_revenue: float
    total_orders: int
    total_customers: int
    total_products: int
    pending_orders: int
    shipped_orders: int
    average_order_value: float
    total_reviews: int
    average_product_rating: float

class DailyRevenue(BaseModel):
    date: str
    revenue: float
    order_count: int

class RevenueAnalytics(BaseModel):
    total_revenue: float
    order_count: int
    average_order_value: float
    daily_revenue: List[DailyRevenue]

class TopProduct(BaseModel):
    product_id: int
    product_name: str
    order_count: int
    revenue: float

class OrderAnalytics(BaseModel):
    total_orders: int
    orders_by_status: Dict[str, int]
    top_products: List[TopProduct]

class UserAnalytics(BaseModel):
    total_users: int
    active_users: int
    inactive_users: int
    purchasing_users: int
    average_lifetime_value: float
    new_users_this_month: int

class ProductPerformance(BaseModel):
    total_products: int
    out_of_stock_products: int
    best_selling: List[TopProduct]
    most_reviewed: List[ReviewedProduct]
    rating_distribution: Dict[int, int]

# --- Reports ---
class SalesProduct(BaseModel):
    product_name: str
    quantity_sold: int
    revenue: float

class SalesReport(BaseModel):
    report_title: str
    generated_date: datetime
    start_date: datetime
    end_date: datetime
    total_sales: float
    total_orders: int
    average_order_value: float
    top_products: List[SalesProduct]

class OrderDetail(BaseModel):
    order_id: int
    order_date: datetime
    customer_name: str
    total_amount: float
    status: str

class OrderReport(BaseModel):
    report_title: str
    generated_date: datetime
    total_orders: int
    orders_by_status: Dict[str, int]
    orders: List[OrderDetail]

class TopCustomer(BaseModel):
    customer_name: str
    total_spending: float
    order_count: int

class UserReport(BaseModel):
    report_title: str
    generated_date: datetime
    total_users: int
    active_users: int
    purchasing_users: int
    reviewing_users: int
    average_lifetime_value: float
    top_customers: List[TopCustomer]

# --- Generic ---
class Message(BaseModel):
    message: str
