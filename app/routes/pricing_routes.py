import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.init import get_db
from enums.space_type import SpaceType
from enums.tenure import Tenure
from exceptions import WarehouseError
from schemas.pricing_schema import (
    EwaSettingsResponse,
    EwaSettingsUpdate,
    OptionalServiceCreate,
    OptionalServiceResponse,
    OptionalServiceUpdate,
    PricingRateCreate,
    PricingRateResponse,
    PricingRateUpdate,
    SystemSettingResponse,
    SystemSettingUpsert,
)
from services.pricing_service import (
    EwaSettingsService,
    OptionalServiceService,
    PricingRateService,
    SystemSettingService,
)
from utils.dependencies import admin_required, get_current_user
from responses.success import data_response
from responses.error import domain_error, internal_server_error, not_found_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pricing", tags=["Pricing"])

rate_service = PricingRateService()
ewa_service = EwaSettingsService()
optional_service_service = OptionalServiceService()
system_setting_service = SystemSettingService()


# Pricing rates


@router.get("/rates")
def get_rates(
    space_type: Optional[SpaceType] = None,
    tenure: Optional[Tenure] = None,
    active_only: bool = True,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        rates = rate_service.get_rates(db, space_type, tenure, active_only)
        return data_response([PricingRateResponse.model_validate(rate) for rate in rates])
    except Exception as e:
        logger.exception("Listing pricing rates failed")
        return internal_server_error(str(e))


@router.post("/rates")
def create_rate(
    rate_in: PricingRateCreate,
    db: Session = Depends(get_db),
    current_user=Depends(admin_required),
):
    try:
        rate = rate_service.create_rate(db, rate_in)
        return data_response(PricingRateResponse.model_validate(rate))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Pricing rate creation failed")
        return internal_server_error(str(e))


@router.patch("/rates/{rate_id}")
def update_rate(
    rate_id: int,
    rate_in: PricingRateUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(admin_required),
):
    try:
        rate = rate_service.get(db, rate_id)
        if not rate:
            return not_found_error(f"No pricing rate found with id {rate_id}")
        rate = rate_service.update_rate(db, rate, rate_in)
        return data_response(PricingRateResponse.model_validate(rate))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Pricing rate update failed")
        return internal_server_error(str(e))


@router.delete("/rates/{rate_id}")
def delete_rate(
    rate_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(admin_required),
):
    try:
        if not rate_service.delete(db, rate_id):
            return not_found_error(f"No pricing rate found with id {rate_id}")
        return data_response({"message": f"Pricing rate with id {rate_id} deleted successfully"})
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Pricing rate deletion failed")
        return internal_server_error(str(e))


# EWA settings


@router.get("/ewa")
def get_ewa_settings(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        return data_response(EwaSettingsResponse.model_validate(ewa_service.require(db)))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("EWA settings lookup failed")
        return internal_server_error(str(e))


@router.put("/ewa")
def update_ewa_settings(
    settings_in: EwaSettingsUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(admin_required),
):
    try:
        settings = ewa_service.update(db, settings_in)
        return data_response(EwaSettingsResponse.model_validate(settings))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("EWA settings update failed")
        return internal_server_error(str(e))


# Optional services


@router.get("/services")
def get_optional_services(
    active_only: bool = True,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        services = optional_service_service.get_services(db, active_only)
        return data_response([OptionalServiceResponse.model_validate(s) for s in services])
    except Exception as e:
        logger.exception("Listing optional services failed")
        return internal_server_error(str(e))


@router.post("/services")
def create_optional_service(
    service_in: OptionalServiceCreate,
    db: Session = Depends(get_db),
    current_user=Depends(admin_required),
):
    try:
        service = optional_service_service.create_service(db, service_in)
        return data_response(OptionalServiceResponse.model_validate(service))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Optional service creation failed")
        return internal_server_error(str(e))


@router.patch("/services/{service_id}")
def update_optional_service(
    service_id: int,
    service_in: OptionalServiceUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(admin_required),
):
    try:
        service = optional_service_service.get(db, service_id)
        if not service:
            return not_found_error(f"No optional service found with id {service_id}")
        service = optional_service_service.update_service(db, service, service_in)
        return data_response(OptionalServiceResponse.model_validate(service))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Optional service update failed")
        return internal_server_error(str(e))


@router.delete("/services/{service_id}")
def delete_optional_service(
    service_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(admin_required),
):
    try:
        if not optional_service_service.delete(db, service_id):
            return not_found_error(f"No optional service found with id {service_id}")
        return data_response({"message": f"Optional service with id {service_id} deleted successfully"})
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Optional service deletion failed")
        return internal_server_error(str(e))


# System settings


@router.get("/settings")
def get_system_settings(
    db: Session = Depends(get_db),
    current_user=Depends(admin_required),
):
    settings = system_setting_service.get_all(db)
    return data_response([SystemSettingResponse.model_validate(s) for s in settings])


@router.put("/settings/{setting_key}")
def upsert_system_setting(
    setting_key: str,
    setting_in: SystemSettingUpsert,
    db: Session = Depends(get_db),
    current_user=Depends(admin_required),
):
    try:
        setting = system_setting_service.upsert(db, setting_key, setting_in)
        return data_response(SystemSettingResponse.model_validate(setting))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("System setting update failed")
        return internal_server_error(str(e))


@router.delete("/settings/{setting_key}")
def delete_system_setting(
    setting_key: str,
    db: Session = Depends(get_db),
    current_user=Depends(admin_required),
):
    try:
        system_setting_service.delete(db, setting_key)
        return data_response({"message": f"System setting '{setting_key}' deleted successfully"})
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("System setting deletion failed")
        return internal_server_error(str(e))
