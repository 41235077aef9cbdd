"""Pydantic schemas used as views in the MVC architecture."""

from .account_requests import AccountRequest, AccountRequestResponse
from .auth import LoginRequest, TokenResponse
from .common import ErrorResponse, HealthResponse
from .flights import (
    FlightAuxiliaryRequest,
    FlightCreateRequest,
    FlightResponse,
    HiLiftResponse,
    SealCountsResponse,
)
from .profiles import ProfileResponse, ProfileUpdateRequest
from .reports import (
    HiLiftLineResponse,
    ReportGroupResponse,
    ReportResponse,
    ReportRowResponse,
    TrailerRowResponse,
)
from .seals import (
    EquipmentResponse,
    SealScanCreateRequest,
    SealScanListResponse,
    SealScanResponse,
)

__all__ = [
    "AccountRequest",
    "AccountRequestResponse",
    "EquipmentResponse",
    "ErrorResponse",
    "FlightAuxiliaryRequest",
    "FlightCreateRequest",
    "FlightResponse",
    "HealthResponse",
    "HiLiftLineResponse",
    "HiLiftResponse",
    "LoginRequest",
    "ProfileResponse",
    "ProfileUpdateRequest",
    "ReportGroupResponse",
    "ReportResponse",
    "ReportRowResponse",
    "SealCountsResponse",
    "SealScanCreateRequest",
    "SealScanListResponse",
    "SealScanResponse",
    "TokenResponse",
    "TrailerRowResponse",
]
