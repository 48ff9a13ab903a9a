"""Entry CRUD and summary endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, Path, Query, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    ValidationError,
)
from pydantic.alias_generators import to_camel

from ..dependencies import get_current_owner, get_entry_service
from ...domain.entries import (
    Category,
    Entry,
    EntryService,
    EntryType,
    EntryValidationError,
)

router = APIRouter(prefix="/api/entries", tags=["entries"])

# No length bound: an unknown id of any length is a 404 from the store.
EntryId = Annotated[str, Path(description="Entry id returned on create.")]
OwnerId = Annotated[str, Depends(get_current_owner)]
Service = Annotated[EntryService, Depends(get_entry_service)]


class EntryFieldsRequest(BaseModel):
    """Raw entry fields; business validation happens in the normalizer."""

    model_config = ConfigDict(extra="ignore")

    description: Optional[str] = None
    category: Optional[str] = None
    # Strict so booleans are not coerced to 1.0/0.0 before the normalizer.
    amount: Optional[Union[StrictInt, StrictFloat, str]] = None
    type: Optional[str] = None
    date: Optional[str] = Field(
        default=None, description="ISO-8601 timestamp; defaults to now on create."
    )


async def read_entry_fields(
    request: Request, _owner_id: OwnerId
) -> EntryFieldsRequest:
    """Decode the JSON body only after the caller is authenticated."""

    try:
        raw: Any = await request.json()
    except ValueError as exc:
        raise EntryValidationError(
            "Request body must be valid JSON", details={"fields": {"body": str(exc)}}
        ) from exc
    try:
        return EntryFieldsRequest.model_validate(raw)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(), body=raw) from exc


EntryFields = Annotated[EntryFieldsRequest, Depends(read_entry_fields)]
ENTRY_BODY_DOC: Dict[str, Any] = {
    "requestBody": {
        "required": True,
        "content": {
            "application/json": {"schema": EntryFieldsRequest.model_json_schema()}
        },
    }
}

class EntryResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    owner_id: str
    date: datetime
    description: str
    category: Category
    type: EntryType
    amount: float
    created_at: datetime
    updated_at: datetime


class DeleteEntryResponse(BaseModel):
    message: str
    id: str


class CategoryTotalsResponse(BaseModel):
    income: float
    expense: float
    total: float


class EntrySummaryResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_income: float
    total_expenses: float
    balance: float
    entries_count: int
    category_breakdown: Dict[str, CategoryTotalsResponse] = Field(default_factory=dict)


@router.post(
    "",
    response_model=EntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an entry",
    openapi_extra=ENTRY_BODY_DOC,
)
def create_entry(
    payload: EntryFields,
    owner_id: OwnerId,
    service: Service,
) -> EntryResponse:
    entry = service.create(owner_id, payload.model_dump(exclude_none=True))
    return _serialize_entry(entry)


@router.get(
    "",
    response_model=List[EntryResponse],
    summary="List entries, most recent first",
)
def list_entries(
    owner_id: OwnerId,
    service: Service,
    start_date: Annotated[Optional[str], Query(alias="startDate")] = None,
    end_date: Annotated[Optional[str], Query(alias="endDate")] = None,
    category: Annotated[Optional[str], Query()] = None,
    entry_type: Annotated[Optional[str], Query(alias="type")] = None,
) -> List[EntryResponse]:
    entries = service.list(
        owner_id,
        {
            "start_date": start_date,
            "end_date": end_date,
            "category": category,
            "type": entry_type,
        },
    )
    return [_serialize_entry(entry) for entry in entries]


@router.get(
    "/summary/stats",
    response_model=EntrySummaryResponse,
    summary="Aggregate totals and per-category breakdown",
)
def get_entry_summary(owner_id: OwnerId, service: Service) -> EntrySummaryResponse:
    summary = service.summary(owner_id)
    return EntrySummaryResponse.model_validate(summary.to_payload())


@router.get(
    "/{entry_id}",
    response_model=EntryResponse,
    summary="Retrieve a single entry",
)
def get_entry(entry_id: EntryId, owner_id: OwnerId, service: Service) -> EntryResponse:
    return _serialize_entry(service.get(owner_id, entry_id))


@router.put(
    "/{entry_id}",
    response_model=EntryResponse,
    summary="Partially update an entry",
    openapi_extra=ENTRY_BODY_DOC,
)
def update_entry(
    entry_id: EntryId,
    payload: EntryFields,
    owner_id: OwnerId,
    service: Service,
) -> EntryResponse:
    fields = payload.model_dump(exclude_unset=True, exclude_none=True)
    entry = service.update(owner_id, entry_id, fields)
    return _serialize_entry(entry)


@router.delete(
    "/{entry_id}",
    response_model=DeleteEntryResponse,
    summary="Delete an entry",
)
def delete_entry(
    entry_id: EntryId, owner_id: OwnerId, service: Service
) -> DeleteEntryResponse:
    removed = service.delete(owner_id, entry_id)
    return DeleteEntryResponse(
        message="Entry deleted successfully", id=removed.entry_id
    )


def _serialize_entry(entry: Entry) -> EntryResponse:
    return EntryResponse(
        id=entry.entry_id,
        owner_id=entry.owner_id,
        date=entry.date,
        description=entry.description,
        category=entry.category,
        type=entry.entry_type,
        amount=entry.amount,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
    )
