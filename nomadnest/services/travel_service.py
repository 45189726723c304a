"""
Hotel, flight and tour guide search over partner inventory, plus bookings.

Search results carry an affiliate link for the partner network and the total
price for the requested stay or party size. Confirmed bookings are mirrored
into the traveller's trips.
"""
import logging
import re
import string
from typing import Optional
from urllib.parse import quote

from ..config import settings
from ..exceptions import ConflictError, PermissionDeniedError
from ..utils import parse_datetime, random_token, utcnow_iso
from .document_store import DocumentStore

logger = logging.getLogger(__name__)

HOTELS = "hotels"
FLIGHTS = "flights"
GUIDES = "guides"
BOOKINGS = "bookings"
TRIPS = "trips"

ITEM_COLLECTIONS = {"hotel": HOTELS, "flight": FLIGHTS, "guide": GUIDES}

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

_DURATION_RE = re.compile(r"(?:(\d+)\s*h)?\s*(?:(\d+)\s*m)?", re.IGNORECASE)


def _contains(text: Optional[str]) -> dict:
    return {"$regex": re.escape(text.strip()), "$options": "i"}


def nights_between(check_in: Optional[str], check_out: Optional[str]) -> int:
    start, end = parse_datetime(check_in), parse_datetime(check_out)
    if start is None or end is None:
        return 1
    return max(1, (end.date() - start.date()).days)


def duration_minutes(duration: Optional[str]) -> int:
    """Parse durations like "5h 30m" into minutes; unparseable values sort last."""
    match = _DURATION_RE.fullmatch((duration or "").strip())
    if not duration or not match or not any(match.groups()):
        return 10 ** 6
    hours, minutes = match.groups()
    return int(hours or 0) * 60 + int(minutes or 0)


def hotel_affiliate_url(hotel: dict) -> str:
    return f"https://www.booking.com/hotel/{quote(hotel.get('slug') or hotel['id'])}.html?aid={settings.booking_partner_id}"


def flight_affiliate_url(flight: dict, passengers: int, depart_date: Optional[str]) -> str:
    origin = (flight.get("departure") or {}).get("code", "").lower()
    arrival = (flight.get("arrival") or {}).get("code", "").lower()
    return (
        f"https://www.skyscanner.com/transport/flights/{origin}/{arrival}/"
        f"?adults={passengers}&outbounddate={depart_date or ''}&partner={settings.skyscanner_api_key}"
    )


def guide_affiliate_url(guide: dict) -> str:
    return f"https://www.tripadvisor.com/Attraction_Review-{quote(guide['id'])}?affiliate_id={settings.tripadvisor_affiliate_id}"


# Search

async def search_hotels(
    store: DocumentStore,
    destination: Optional[str] = None,
    check_in: Optional[str] = None,
    check_out: Optional[str] = None,
    guests: int = 1,
    sort_by: str = "price",
) -> list[dict]:
    query = {"location": _contains(destination)} if destination and destination.strip() else None
    sort = [("rating", -1)] if sort_by == "rating" else [("price", 1)]
    nights = nights_between(check_in, check_out)
    hotels = await store.find(HOTELS, query, sort=sort)
    for hotel in hotels:
        hotel.setdefault("affiliateUrl", hotel_affiliate_url(hotel))
        hotel["nights"] = nights
        hotel["guests"] = guests
        hotel["totalPrice"] = round((hotel.get("price") or 0) * nights, 2)
    return hotels


async def search_flights(
    store: DocumentStore,
    departure: Optional[str] = None,
    destination: Optional[str] = None,
    depart_date: Optional[str] = None,
    return_date: Optional[str] = None,
    passengers: int = 1,
    max_stops: Optional[int] = None,
    sort_by: str = "price",
) -> list[dict]:
    clauses = []
    if departure and departure.strip():
        clauses.append({"$or": [{"departure.code": _contains(departure)}, {"departure.city": _contains(departure)}]})
    if destination and destination.strip():
        clauses.append({"$or": [{"arrival.code": _contains(destination)}, {"arrival.city": _contains(destination)}]})
    if max_stops is not None:
        clauses.append({"stops": {"$lte": max_stops}})
    query = {"$and": clauses} if clauses else None

    flights = await store.find(FLIGHTS, query)
    if sort_by == "duration":
        flights.sort(key=lambda f: duration_minutes(f.get("duration")))
    elif sort_by == "departure":
        flights.sort(key=lambda f: (f.get("departure") or {}).get("time") or "99:99")
    else:
        flights.sort(key=lambda f: f.get("price") or 0)

    for flight in flights:
        flight["affiliateUrl"] = flight_affiliate_url(flight, passengers, depart_date)
        flight["passengers"] = passengers
        flight["returnDate"] = return_date
        flight["totalPrice"] = round((flight.get("price") or 0) * passengers, 2)
    return flights


async def search_guides(
    store: DocumentStore,
    destination: Optional[str] = None,
    date: Optional[str] = None,
    people: int = 1,
) -> list[dict]:
    query = {}
    if destination and destination.strip():
        query["location"] = _contains(destination)
    when = parse_datetime(date)
    if when is not None:
        query["availability"] = WEEKDAYS[when.weekday()]
    guides = await store.find(GUIDES, query, sort=[("rating", -1)])
    for guide in guides:
        guide.setdefault("affiliateUrl", guide_affiliate_url(guide))
        guide["totalPrice"] = round((guide.get("price") or 0) * people, 2)
    return guides


async def get_hotel(store: DocumentStore, hotel_id: str) -> dict:
    return await store.get_or_404(HOTELS, hotel_id, "Hotel")


async def get_flight(store: DocumentStore, flight_id: str) -> dict:
    return await store.get_or_404(FLIGHTS, flight_id, "Flight")


async def get_guide(store: DocumentStore, guide_id: str) -> dict:
    return await store.get_or_404(GUIDES, guide_id, "Guide")


# Bookings

def generate_reference() -> str:
    return "NN-" + random_token(8, string.ascii_uppercase + string.digits)


def booking_amount(booking_type: str, item: dict, data: dict) -> float:
    price = item.get("price") or 0
    if booking_type == "flight":
        return round(price * data.get("passengers", 1), 2)
    if booking_type == "hotel":
        return round(price * nights_between(data.get("startDate"), data.get("endDate")), 2)
    return round(price * data.get("groupSize", 1), 2)


def _trip_details(booking_type: str, item: dict, data: dict, amount: float) -> dict:
    details = {
        "startDate": data.get("startDate"),
        "endDate": data.get("endDate"),
        "price": amount,
        "currency": item.get("currency") or settings.currency,
    }
    if booking_type == "hotel":
        details.update({
            "title": item.get("name"),
            "destinationLocation": item.get("location"),
            "hotelName": item.get("name"),
            "hotelId": item["id"],
            "guests": data.get("guests", 1),
            "roomType": data.get("details", {}).get("roomType"),
        })
    elif booking_type == "flight":
        departure = item.get("departure") or {}
        arrival = item.get("arrival") or {}
        details.update({
            "title": f"{item.get('airline')} {item.get('flightNumber')}",
            "destinationLocation": arrival.get("city"),
            "departureLocation": departure.get("city"),
            "airline": item.get("airline"),
            "flightNumber": item.get("flightNumber"),
            "departureTime": departure.get("time"),
            "arrivalTime": arrival.get("time"),
            "guests": data.get("passengers", 1),
        })
    else:
        details.update({
            "title": f"Tour with {item.get('name')}",
            "destinationLocation": item.get("location"),
            "guideName": item.get("name"),
            "guideId": item["id"],
            "guests": data.get("groupSize", 1),
            "tourType": data.get("details", {}).get("tourType"),
            "duration": data.get("details", {}).get("duration"),
        })
    return details


async def create_booking(store: DocumentStore, user: dict, data: dict) -> dict:
    booking_type = data["type"]
    item = await store.get_or_404(ITEM_COLLECTIONS[booking_type], data["itemId"], booking_type.capitalize())
    start, end = parse_datetime(data.get("startDate")), parse_datetime(data.get("endDate"))
    if start is not None and end is not None and end < start:
        raise ConflictError("End date cannot be before start date")

    amount = booking_amount(booking_type, item, data)
    reference = generate_reference()
    trip_details = _trip_details(booking_type, item, data, amount)
    booking = await store.insert_one(BOOKINGS, {
        "type": booking_type,
        "itemId": item["id"],
        "userId": user["id"],
        "customerName": data["customerName"],
        "customerEmail": data["customerEmail"],
        "bookingDate": utcnow_iso(),
        "startDate": data.get("startDate"),
        "endDate": data.get("endDate"),
        "amount": amount,
        "currency": trip_details["currency"],
        "status": "confirmed",
        "reference": reference,
        "details": {**data.get("details", {}), **{k: v for k, v in trip_details.items() if v is not None}},
    })
    trip = await store.insert_one(TRIPS, {
        "userId": user["id"],
        "type": booking_type,
        "status": "confirmed",
        "bookingReference": reference,
        "bookingId": booking["id"],
        "editCount": 0,
        "details": trip_details,
    })
    logger.info(f"Created {booking_type} booking {reference} for user {user['id']}")
    booking["tripId"] = trip["id"]
    return booking


async def list_bookings(store: DocumentStore, booking_type: Optional[str] = None, status: Optional[str] = None) -> list[dict]:
    query = {}
    if booking_type:
        query["type"] = booking_type
    if status:
        query["status"] = status
    return await store.find(BOOKINGS, query, sort=[("bookingDate", -1)])


async def list_user_bookings(store: DocumentStore, user_id: str) -> list[dict]:
    return await store.find(BOOKINGS, {"userId": user_id}, sort=[("bookingDate", -1)])


async def _set_booking_status(store: DocumentStore, booking: dict, status: str) -> dict:
    if booking.get("status") == "cancelled" and status != "cancelled":
        raise ConflictError("A cancelled booking cannot be reinstated")
    updated = await store.update_by_id(BOOKINGS, booking["id"], {"$set": {"status": status}})
    if status == "cancelled":
        await store.update_many(
            TRIPS, {"bookingReference": booking["reference"]}, {"$set": {"status": "cancelled"}})
    return updated


async def update_booking_status(store: DocumentStore, booking_id: str, status: str) -> dict:
    booking = await store.get_or_404(BOOKINGS, booking_id, "Booking")
    logger.info(f"Booking {booking['reference']} status {booking.get('status')} -> {status}")
    return await _set_booking_status(store, booking, status)


async def cancel_booking(store: DocumentStore, booking_id: str, user_id: str) -> dict:
    booking = await store.get_or_404(BOOKINGS, booking_id, "Booking")
    if booking.get("userId") != user_id:
        raise PermissionDeniedError("You can only cancel your own bookings")
    return await _set_booking_status(store, booking, "cancelled")


async def booking_stats(store: DocumentStore) -> dict:
    bookings = await store.find(BOOKINGS)
    stats = {"total": len(bookings), "revenue": 0.0, "byType": {}, "byStatus": {}}
    for booking in bookings:
        by_type = stats["byType"].setdefault(booking["type"], {"count": 0, "revenue": 0.0})
        by_type["count"] += 1
        status = booking.get("status")
        stats["byStatus"][status] = stats["byStatus"].get(status, 0) + 1
        if status == "confirmed":
            amount = booking.get("amount") or 0
            by_type["revenue"] = round(by_type["revenue"] + amount, 2)
            stats["revenue"] = round(stats["revenue"] + amount, 2)
    return stats
