import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.init import get_db
from enums.quote_status import QuoteStatus
from exceptions import WarehouseError
from schemas.quote_schema import CalculationInputs, QuoteCreate, QuoteResponse, QuoteStatusUpdate
from services.email_service import EmailService
from services.quote_service import QuoteService
from utils.dependencies import get_current_user, is_staff
from responses.success import data_response
from responses.error import domain_error, forbidden_error, internal_server_error, not_found_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quotes", tags=["Quotes"])

quote_service = QuoteService()
email_service = EmailService()


def _can_access(quote, user) -> bool:
    return is_staff(user) or quote.user_id == user.id


@router.post("/calculate")
def calculate_quote(
    inputs: CalculationInputs,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """Price a request against the current rates without saving anything"""
    try:
        return data_response(quote_service.calculate(db, inputs))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Quote calculation failed")
        return internal_server_error(str(e))


@router.post("")
async def create_quote(
    quote_in: QuoteCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        quote = quote_service.create(db, quote_in, current_user)
        response = QuoteResponse.model_validate(quote)
        if quote.client_email:
            await email_service.send_quote_email(quote.client_email, quote)
        return data_response(response)
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Quote creation failed")
        return internal_server_error(str(e))


@router.get("")
def get_quotes(
    status: Optional[QuoteStatus] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """Staff see every quote, clients their own"""
    try:
        user_id = None if is_staff(current_user) else current_user.id
        quotes = quote_service.get_all(db, user_id, status, skip, limit)
        return data_response([QuoteResponse.model_validate(q) for q in quotes])
    except Exception as e:
        logger.exception("Listing quotes failed")
        return internal_server_error(str(e))


@router.get("/{quote_id}")
def get_quote(
    quote_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    quote = quote_service.get(db, quote_id)
    if not quote:
        return not_found_error(f"No quote found with id {quote_id}")
    if not _can_access(quote, current_user):
        return forbidden_error("You are not authorized to view this quote")
    return data_response(QuoteResponse.model_validate(quote))


@router.patch("/{quote_id}/status")
def update_quote_status(
    quote_id: int,
    payload: QuoteStatusUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        quote = quote_service.get(db, quote_id)
        if not quote:
            return not_found_error(f"No quote found with id {quote_id}")
        if not _can_access(quote, current_user):
            return forbidden_error("You are not authorized to update this quote")
        quote = quote_service.change_status(db, quote, payload.status)
        return data_response(QuoteResponse.model_validate(quote))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Quote status update failed")
        return internal_server_error(str(e))
