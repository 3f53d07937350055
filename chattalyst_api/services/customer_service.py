import uuid
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from chattalyst_api.logging_config import get_logger
from chattalyst_api.models import Customer
from chattalyst_api.services.phone import canonicalize_phone
from chattalyst_api.services.result import CUSTOMER_ERROR, Result

logger = get_logger("customer_service")


def _get_by_phone(db: Session, phone_number: str) -> Optional[Customer]:
    return db.query(Customer).filter(Customer.phone_number == phone_number).first()


def _maybe_update_name(db: Session, customer: Customer, contact_name: Optional[str], from_me: bool) -> None:
    # pushName on fromMe messages is the owner's name, not the contact's
    if from_me or not contact_name:
        return
    if customer.name and customer.name != customer.phone_number:
        return
    logger.info(f"Updating customer {customer.id} name from {customer.name!r} to {contact_name!r}")
    customer.name = contact_name
    db.flush()


def find_or_create_customer(
    db: Session,
    phone_identifier: str,
    contact_name: Optional[str],
    from_me: bool,
    country_code: str,
) -> Result[UUID]:
    """Resolve a customer id for a phone identifier, creating the customer on first contact."""
    phone_number = canonicalize_phone(phone_identifier, country_code)
    if not phone_number:
        return Result.failure(f"Cannot derive phone number from {phone_identifier!r}", CUSTOMER_ERROR)

    try:
        customer = _get_by_phone(db, phone_number)
        if customer:
            _maybe_update_name(db, customer, contact_name, from_me)
            return Result.success(customer.id)

        name = contact_name if contact_name and not from_me else phone_number
        try:
            with db.begin_nested():
                customer = Customer(id=uuid.uuid4(), phone_number=phone_number, name=name)
                db.add(customer)
                db.flush()
        except IntegrityError:
            logger.info(f"Customer {phone_number} created concurrently, re-fetching")
            customer = _get_by_phone(db, phone_number)
            if not customer:
                return Result.failure(f"Customer {phone_number} vanished after conflict", CUSTOMER_ERROR)
            return Result.success(customer.id)

        logger.info(f"Created customer {customer.id} for {phone_number}")
        return Result.success(customer.id)

    except SQLAlchemyError as e:
        logger.error(f"Customer resolution failed for {phone_number}: {e}")
        return Result.failure(str(e), CUSTOMER_ERROR)
