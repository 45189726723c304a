import datetime
from pydantic import BaseModel, Field, ConfigDict, EmailStr
from typing import Optional, List, Any, Dict, Literal


# Auth

class UserRegister(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, examples=["Jane Traveler"])


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Dict[str, Any]


class ErrorResponse(BaseModel):
    detail: str


class Paginated(BaseModel):
    items: List[Dict[str, Any]]
    total: int
    limit: int
    offset: int


# Blog

class PostAuthor(BaseModel):
    name: str
    avatar: Optional[str] = None
    bio: Optional[str] = None
    social: Optional[Dict[str, str]] = None


class PostSEO(BaseModel):
    metaTitle: Optional[str] = None
    metaDescription: Optional[str] = None
    keywords: Optional[List[str]] = None
    ogImage: Optional[str] = None


class MediaItem(BaseModel):
    type: Literal["image", "video"] = "image"
    url: str
    caption: Optional[str] = None


class PostCreate(BaseModel):
    title: str = Field(..., min_length=1, examples=["Ten Days in Kyoto"])
    slug: Optional[str] = None
    excerpt: Optional[str] = ""
    content: str = ""
    author: Optional[PostAuthor] = None
    category: Optional[str] = None
    coverImage: Optional[str] = None
    date: Optional[str] = None
    readTime: Optional[str] = None
    topics: List[str] = Field(default_factory=list)
    seo: Optional[PostSEO] = None
    mediaItems: List[MediaItem] = Field(default_factory=list)
    status: Literal["published", "draft"] = "published"


class PostUpdate(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    author: Optional[PostAuthor] = None
    category: Optional[str] = None
    coverImage: Optional[str] = None
    date: Optional[str] = None
    readTime: Optional[str] = None
    topics: Optional[List[str]] = None
    seo: Optional[PostSEO] = None
    mediaItems: Optional[List[MediaItem]] = None
    status: Optional[Literal["published", "draft"]] = None


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1)


class LikeResponse(BaseModel):
    liked: bool
    likes: int


# Taxonomy

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, examples=["Travel"])
    slug: Optional[str] = None
    icon: Optional[str] = None
    image: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    icon: Optional[str] = None
    image: Optional[str] = None


class TopicCreate(BaseModel):
    name: str = Field(..., min_length=1, examples=["Hiking"])
    slug: Optional[str] = None


class TopicUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None


# Community

ExperienceLevel = Literal["Newbie", "Casual", "Regular", "Experienced", "Globetrotter"]


class VisitedCountry(BaseModel):
    name: str
    year: Optional[int] = None


class NotificationPreferences(BaseModel):
    contentWarnings: Optional[bool] = None
    messages: Optional[bool] = None
    connections: Optional[bool] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    username: Optional[str] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    experienceLevel: Optional[ExperienceLevel] = None
    travelStyles: Optional[List[str]] = None
    interests: Optional[List[str]] = None
    wishlistDestinations: Optional[List[str]] = None
    visitedCountries: Optional[List[VisitedCountry]] = None
    socialProfiles: Optional[Dict[str, str]] = None
    notificationPreferences: Optional[NotificationPreferences] = None


class CommunityPostCreate(BaseModel):
    content: str = Field(..., min_length=1)
    images: List[str] = Field(default_factory=list)
    location: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    visibility: Literal["public", "connections", "private"] = "public"


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    category: Optional[str] = None
    image: Optional[str] = None
    topics: List[str] = Field(default_factory=list)


class EventLocation(BaseModel):
    type: Literal["online", "physical"] = "online"
    details: str = ""


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    type: Optional[str] = None
    date: str
    endDate: Optional[str] = None
    location: EventLocation = Field(default_factory=EventLocation)
    image: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=1)
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class BuddyRequestCreate(BaseModel):
    destination: str = Field(..., min_length=1)
    startDate: str
    endDate: str
    travelStyle: List[str] = Field(default_factory=list)
    description: str = ""


class MatchPreferences(BaseModel):
    destinations: List[str] = Field(default_factory=list)
    travelStyles: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)
    dateRange: Optional[Dict[str, Optional[str]]] = None
    ageRange: Optional[Dict[str, Optional[int]]] = None
    languages: List[str] = Field(default_factory=list)


class MatchResponse(BaseModel):
    accepted: bool


# Travel and trips

class BookingCreate(BaseModel):
    type: Literal["flight", "hotel", "guide"]
    itemId: str
    customerName: str
    customerEmail: EmailStr
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    passengers: int = Field(1, ge=1)
    guests: int = Field(1, ge=1)
    groupSize: int = Field(1, ge=1)
    details: Dict[str, Any] = Field(default_factory=dict)


class BookingStatusUpdate(BaseModel):
    status: Literal["confirmed", "pending", "cancelled"]


class TripDetails(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: Optional[str] = None
    destinationLocation: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    guests: Optional[int] = None


class TripCreate(BaseModel):
    type: Literal["hotel", "flight", "guide"]
    status: Literal["planned", "confirmed"] = "planned"
    details: TripDetails


class TripUpdate(BaseModel):
    details: TripDetails


class TripQuota(BaseModel):
    subscribed: bool
    tripsUsed: int
    tripLimit: Optional[int] = None
    editLimit: Optional[int] = None


# Subscriptions

class PaymentDetails(BaseModel):
    method: Literal["card", "paypal"] = "card"
    cardNumber: Optional[str] = None
    cardholderName: Optional[str] = None
    expiryDate: Optional[str] = None
    cvv: Optional[str] = None


class SubscriptionCreate(BaseModel):
    planType: str = Field(..., examples=["monthly", "annual"])
    payment: PaymentDetails = Field(default_factory=PaymentDetails)


# Newsletter

class NewsletterSubscribe(BaseModel):
    email: EmailStr
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


# Admin

class UserBlock(BaseModel):
    reason: str = "Violation of community guidelines"


class ThemeColors(BaseModel):
    background: Optional[str] = None
    foreground: Optional[str] = None
    primary: Optional[str] = None
    footer: Optional[str] = None
    header: Optional[str] = None
    card: Optional[str] = None


class ThemeUpdate(BaseModel):
    theme: Literal["light", "dark", "system"] = "light"
    lightThemeColors: Optional[ThemeColors] = None
    darkThemeColors: Optional[ThemeColors] = None


class AppearanceUpdate(BaseModel):
    fontFamily: Optional[Literal["Open Sans", "Roboto", "Inter", "Lato", "Montserrat"]] = None
    headerFont: Optional[str] = None
    borderRadius: Optional[str] = None
    animationSpeed: Optional[Literal["slow", "normal", "fast"]] = None
    customCss: Optional[str] = None


class RestoreResponse(BaseModel):
    restored: Dict[str, int]


# Ads

AdType = Literal["header", "footer", "sidebar", "in-content", "between-posts", "custom"]
AdFormat = Literal["auto", "rectangle", "horizontal", "vertical"]
AdLocation = Literal["all-pages", "home", "blog", "travel", "community"]


class AdPlacementCreate(BaseModel):
    name: str = Field(..., min_length=1, examples=["Header Banner"])
    slot: str = Field(..., min_length=1, examples=["1234567890"])
    type: AdType
    format: AdFormat = "auto"
    location: AdLocation = "all-pages"
    isEnabled: bool = True
    position: Optional[int] = Field(None, ge=0)
    responsive: bool = True
    customCode: Optional[str] = None


class AdPlacementUpdate(BaseModel):
    name: Optional[str] = None
    slot: Optional[str] = None
    type: Optional[AdType] = None
    format: Optional[AdFormat] = None
    location: Optional[AdLocation] = None
    position: Optional[int] = Field(None, ge=0)
    responsive: Optional[bool] = None
    customCode: Optional[str] = None


class AdToggle(BaseModel):
    isEnabled: bool


class AdDailyStats(BaseModel):
    date: datetime.date
    impressions: int = Field(..., ge=0)
    clicks: int = Field(..., ge=0)
    revenue: float = Field(0.0, ge=0)
