from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_active_user
from ..schemas import BookingCreate
from ..services import travel_service
from ..services.document_store import DocumentStore, get_store
from ..services.jwt_service import JWTService


router = APIRouter(prefix="/travel", tags=["travel"])


@router.get("/hotels")
async def search_hotels(
    destination: Optional[str] = None,
    check_in: Optional[str] = Query(None, alias="checkIn"),
    check_out: Optional[str] = Query(None, alias="checkOut"),
    guests: int = Query(1, ge=1),
    sort_by: str = Query("price", alias="sortBy", pattern="^(price|rating)$"),
    store: DocumentStore = Depends(get_store),
):
    return await travel_service.search_hotels(store, destination, check_in, check_out, guests, sort_by)


@router.get("/hotels/{hotel_id}")
async def get_hotel(hotel_id: str, store: DocumentStore = Depends(get_store)):
    return await travel_service.get_hotel(store, hotel_id)


@router.get("/flights")
async def search_flights(
    departure: Optional[str] = None,
    destination: Optional[str] = None,
    depart_date: Optional[str] = Query(None, alias="departDate"),
    return_date: Optional[str] = Query(None, alias="returnDate"),
    passengers: int = Query(1, ge=1),
    max_stops: Optional[int] = Query(None, alias="maxStops", ge=0),
    sort_by: str = Query("price", alias="sortBy", pattern="^(price|duration|departure)$"),
    store: DocumentStore = Depends(get_store),
):
    return await travel_service.search_flights(
        store, departure, destination, depart_date, return_date, passengers, max_stops, sort_by)


@router.get("/flights/{flight_id}")
async def get_flight(flight_id: str, store: DocumentStore = Depends(get_store)):
    return await travel_service.get_flight(store, flight_id)


@router.get("/guides")
async def search_guides(
    destination: Optional[str] = None,
    date: Optional[str] = None,
    people: int = Query(1, ge=1),
    store: DocumentStore = Depends(get_store),
):
    return await travel_service.search_guides(store, destination, date, people)


@router.get("/guides/{guide_id}")
async def get_guide(guide_id: str, store: DocumentStore = Depends(get_store)):
    return await travel_service.get_guide(store, guide_id)


@router.post("/bookings", status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreate,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await travel_service.create_booking(store, current_user, payload.model_dump())


@router.get("/bookings")
async def my_bookings(
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await travel_service.list_user_bookings(store, current_user["id"])


@router.post("/bookings/{booking_id}/cancel")
async def cancel_booking(
    booking_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await travel_service.cancel_booking(store, booking_id, current_user["id"])
