from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from enums.warehouse_status import WarehouseStatus


class WarehouseBase(BaseModel):
    name: str
    location: str
    description: Optional[str] = None
    total_space: float = Field(gt=0)
    occupied_space: float = Field(default=0.0, ge=0)
    has_mezzanine: bool = False
    mezzanine_space: Optional[float] = Field(default=None, ge=0)
    mezzanine_occupied: Optional[float] = Field(default=None, ge=0)
    status: WarehouseStatus = WarehouseStatus.ACTIVE


class WarehouseCreate(WarehouseBase):
    pass


class WarehouseUpdate(BaseModel):
    name: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    total_space: Optional[float] = Field(default=None, gt=0)
    occupied_space: Optional[float] = Field(default=None, ge=0)
    has_mezzanine: Optional[bool] = None
    mezzanine_space: Optional[float] = Field(default=None, ge=0)
    mezzanine_occupied: Optional[float] = Field(default=None, ge=0)
    status: Optional[WarehouseStatus] = None


class WarehouseResponse(BaseModel):
    id: int
    name: str
    location: str
    description: Optional[str] = None
    total_space: float
    occupied_space: float
    has_mezzanine: bool
    mezzanine_space: Optional[float] = None
    mezzanine_occupied: Optional[float] = None
    status: WarehouseStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WarehouseMinimumResponse(BaseModel):
    id: int
    name: str
    location: str

    model_config = ConfigDict(from_attributes=True)
