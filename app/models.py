from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class MediaStatus:
    AVAILABLE = "Available"
    BOOKED = "Booked"
    COMING_SOON = "Coming Soon"
    MAINTENANCE = "Maintenance"

    ALL = (AVAILABLE, BOOKED, COMING_SOON, MAINTENANCE)


class MediaType:
    UNIPOLE = "Unipole"
    HOARDING = "Hoarding"
    GANTRY = "Gantry"
    KIOSK = "Kiosk"
    DIGITAL_LED = "Digital LED"

    ALL = (UNIPOLE, HOARDING, GANTRY, KIOSK, DIGITAL_LED)


class BookingStatus:
    UPCOMING = "Upcoming"
    ACTIVE = "Active"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    ALL = (UPCOMING, ACTIVE, COMPLETED, CANCELLED)


class PaymentStatus:
    PENDING = "Pending"
    PARTIALLY_PAID = "Partially Paid"
    PAID = "Paid"
    CANCELLED = "Cancelled"

    ALL = (PENDING, PARTIALLY_PAID, PAID, CANCELLED)


class PaymentMode:
    ALL = ("Cash", "Cheque", "Online", "Bank Transfer")


class TaxFrequency:
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    HALF_YEARLY = "Half-Yearly"
    YEARLY = "Yearly"
    ONE_TIME = "One-Time"

    ALL = (MONTHLY, QUARTERLY, HALF_YEARLY, YEARLY, ONE_TIME)


class TaxStatus:
    PENDING = "Pending"
    PAID = "Paid"
    OVERDUE = "Overdue"  # derived at read time, never stored


class AgreementStatus:
    ACTIVE = "Active"
    EXPIRING_SOON = "Expiring Soon"
    EXPIRED = "Expired"


class MaintenanceStatus:
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"

    OPEN = (PENDING, IN_PROGRESS)


class MaintenancePriority:
    ALL = ("Low", "Medium", "High", "Critical")


class ActivityAction:
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    RESTORE = "RESTORE"


class ActivityModule:
    BOOKING = "BOOKING"
    MEDIA = "MEDIA"
    PAYMENT = "PAYMENT"
    CUSTOMER = "CUSTOMER"
    COMPLIANCE = "COMPLIANCE"
    SYSTEM = "SYSTEM"


class SoftDeleteMixin:
    """Tombstone columns shared by every recycle-bin aware table"""

    deleted = Column(Boolean, default=False, nullable=False, index=True)
    deleted_at = Column(DateTime, nullable=True)

    def mark_deleted(self, when):
        self.deleted = True
        self.deleted_at = when

    def restore(self):
        self.deleted = False
        self.deleted_at = None


class MediaUnit(SoftDeleteMixin, Base):
    __tablename__ = "media"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, index=True, nullable=False)  # e.g. SRA-RPR-001
    name = Column(String(255), nullable=False)
    media_type = Column(String(50), nullable=False)  # Unipole, Hoarding, Gantry, Kiosk, Digital LED
    state = Column(String(100), nullable=False)
    district = Column(String(100), nullable=False, index=True)
    city = Column(String(100), nullable=False)
    address = Column(String(500), nullable=True)
    size = Column(String(50), nullable=True)  # e.g. "40x20 ft"
    lighting = Column(String(50), nullable=True)  # Front Lit, Back Lit, Non Lit
    facing = Column(String(100), nullable=True)
    price_per_month = Column(Float, nullable=False, default=0)
    image_url = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=MediaStatus.AVAILABLE, index=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    calendar = relationship(
        "MediaBookedDate",
        back_populates="media",
        cascade="all, delete-orphan",
        order_by="MediaBookedDate.start_date",
    )
    bookings = relationship("Booking", back_populates="media")


class MediaBookedDate(Base):
    """Calendar projection of the bookings that currently hold a media unit"""

    __tablename__ = "media_booked_dates"

    id = Column(Integer, primary_key=True, index=True)
    media_id = Column(Integer, ForeignKey("media.id"), nullable=False, index=True)
    booking_id = Column(Integer, nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    media = relationship("MediaUnit", back_populates="calendar")


class Customer(SoftDeleteMixin, Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    company = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(50), nullable=True)
    customer_group = Column(String(100), nullable=True)  # agency, direct, government...
    address = Column(String(500), nullable=True)
    gstin = Column(String(20), nullable=True)
    # Running counters maintained with atomic increments by the ledger
    total_bookings = Column(Integer, nullable=False, default=0)
    total_spent = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    bookings = relationship("Booking", back_populates="customer")


class Booking(SoftDeleteMixin, Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    media_id = Column(Integer, ForeignKey("media.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.UPCOMING, index=True)
    amount = Column(Float, nullable=False)
    amount_paid = Column(Float, nullable=False, default=0)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING, index=True)
    payment_mode = Column(String(20), nullable=True)
    notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    media = relationship("MediaUnit", back_populates="bookings")
    customer = relationship("Customer", back_populates="bookings")
    payments = relationship("Payment", back_populates="booking")

    # Optimistic locking: UPDATE ... WHERE version = :read_version
    __mapper_args__ = {"version_id_col": version}


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    mode = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default="Completed", index=True)
    transaction_id = Column(String(255), nullable=True)
    receipt_url = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    paid_on = Column(DateTime, server_default=func.now())
    created_at = Column(DateTime, server_default=func.now())

    booking = relationship("Booking", back_populates="payments")


class TenderAgreement(SoftDeleteMixin, Base):
    __tablename__ = "tenders"

    id = Column(Integer, primary_key=True, index=True)
    tender_name = Column(String(255), nullable=False)
    tender_number = Column(String(100), unique=True, index=True, nullable=False)
    district = Column(String(100), nullable=False, index=True)
    area = Column(String(255), nullable=True)
    media_ids = Column(JSON, default=list, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False, index=True)
    tax_frequency = Column(String(20), nullable=False, default=TaxFrequency.YEARLY)
    license_fee = Column(Float, nullable=False)  # annualized
    document_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    installments = relationship(
        "TaxInstallment", back_populates="agreement", order_by="TaxInstallment.due_date"
    )


class TaxInstallment(SoftDeleteMixin, Base):
    __tablename__ = "tax_records"

    id = Column(Integer, primary_key=True, index=True)
    agreement_id = Column(Integer, ForeignKey("tenders.id"), nullable=False, index=True)
    # Denormalized for quick reference in listings
    tender_number = Column(String(100), nullable=True)
    district = Column(String(100), nullable=True)
    area = Column(String(255), nullable=True)
    due_date = Column(Date, nullable=False, index=True)
    amount = Column(Float, nullable=False)
    status = Column(String(20), nullable=False, default=TaxStatus.PENDING, index=True)
    payment_date = Column(DateTime, nullable=True)
    receipt_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    agreement = relationship("TenderAgreement", back_populates="installments")


class MaintenanceRecord(Base):
    """A repair or inspection task on a media unit"""

    __tablename__ = "maintenance"

    id = Column(Integer, primary_key=True, index=True)
    media_id = Column(Integer, ForeignKey("media.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=MaintenanceStatus.PENDING, index=True)
    priority = Column(String(20), nullable=False, default="Medium")
    scheduled_date = Column(Date, nullable=True)
    completed_date = Column(DateTime, nullable=True)
    cost = Column(Float, nullable=True)
    assigned_to = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    media = relationship("MediaUnit")


class ActivityLog(Base):
    """Audit trail of operator actions. User fields are snapshots of the token claims."""

    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_sub = Column(String(255), nullable=True, index=True)  # None for scheduled jobs
    username = Column(String(255), nullable=False, default="System")
    role = Column(String(20), nullable=False, default="System")
    action = Column(String(20), nullable=False, index=True)
    module = Column(String(20), nullable=False, index=True)
    description = Column(String(500), nullable=False)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), index=True)
