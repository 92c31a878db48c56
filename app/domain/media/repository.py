"""Media repository - Database operations for media units"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Booking, BookingStatus, MediaBookedDate, MediaUnit


class MediaRepository:
    """Repository for media unit database operations"""

    @staticmethod
    def get_media_by_id(db: Session, media_id: int, include_deleted: bool = False) -> Optional[MediaUnit]:
        query = db.query(MediaUnit).filter(MediaUnit.id == media_id)
        if not include_deleted:
            query = query.filter(MediaUnit.deleted.is_(False))
        return query.first()

    @staticmethod
    def get_media_by_code(db: Session, code: str) -> Optional[MediaUnit]:
        return db.query(MediaUnit).filter(MediaUnit.code == code).first()

    @staticmethod
    def search_media(
        db: Session,
        state: Optional[str] = None,
        district: Optional[str] = None,
        city: Optional[str] = None,
        media_type: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        page: int = 1,
        limit: int = 50,
    ) -> tuple[list[MediaUnit], int]:
        """Filter non-deleted media, returning one page and the total count"""
        query = db.query(MediaUnit).filter(MediaUnit.deleted.is_(False))

        if state and state != "all":
            query = query.filter(MediaUnit.state == state)
        if district and district != "all":
            query = query.filter(MediaUnit.district == district)
        if city and city != "all":
            query = query.filter(MediaUnit.city == city)
        if media_type and media_type != "all":
            query = query.filter(MediaUnit.media_type == media_type)
        if status and status != "all":
            query = query.filter(MediaUnit.status == status)
        if min_price is not None:
            query = query.filter(MediaUnit.price_per_month >= min_price)
        if max_price is not None:
            query = query.filter(MediaUnit.price_per_month <= max_price)
        if search:
            search_term = f"%{search.lower()}%"
            query = query.filter(
                (MediaUnit.name.ilike(search_term))
                | (MediaUnit.city.ilike(search_term))
                | (MediaUnit.address.ilike(search_term))
                | (MediaUnit.code.ilike(search_term))
            )

        total = query.count()
        items = (
            query.order_by(MediaUnit.created_at.desc(), MediaUnit.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    @staticmethod
    def create_media(db: Session, **media_data) -> MediaUnit:
        media = MediaUnit(**media_data)
        db.add(media)
        db.commit()
        db.refresh(media)
        return media

    @staticmethod
    def update_media(db: Session, media: MediaUnit, **updates) -> MediaUnit:
        for key, value in updates.items():
            if value is not None and hasattr(media, key):
                setattr(media, key, value)

        db.commit()
        db.refresh(media)
        return media

    @staticmethod
    def has_active_booking(db: Session, media_id: int) -> bool:
        """Any non-deleted booking currently Active on this media unit"""
        return (
            db.query(Booking.id)
            .filter(
                Booking.media_id == media_id,
                Booking.deleted.is_(False),
                Booking.status == BookingStatus.ACTIVE,
            )
            .first()
            is not None
        )

    @staticmethod
    def remove_calendar_entries(db: Session, booking_id: int) -> int:
        return (
            db.query(MediaBookedDate)
            .filter(MediaBookedDate.booking_id == booking_id)
            .delete(synchronize_session=False)
        )

    @staticmethod
    def add_calendar_entry(db: Session, media_id: int, booking_id: int, start_date, end_date) -> MediaBookedDate:
        entry = MediaBookedDate(
            media_id=media_id, booking_id=booking_id, start_date=start_date, end_date=end_date
        )
        db.add(entry)
        return entry

    @staticmethod
    def get_calendar(db: Session, media_id: int) -> list[MediaBookedDate]:
        return (
            db.query(MediaBookedDate)
            .filter(MediaBookedDate.media_id == media_id)
            .order_by(MediaBookedDate.start_date.asc())
            .all()
        )
