from decimal import Decimal, InvalidOperation
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from study_store.routers.deps import get_catalog_store, require_admin
from study_store.schemas.catalog import (
    ItemListResponse,
    ItemRemovedResponse,
    ItemResponse,
    SubjectCreate,
    SubjectsResponse,
)
from study_store.services.catalog import CatalogStore
from study_store.services.tokens import AccessTokenData

router = APIRouter(tags=["catalog"])


def _parse_price(raw_price: str) -> Decimal:
    try:
        price = Decimal(raw_price.strip())
    except InvalidOperation as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Price must be a number",
        ) from exc
    if not price.is_finite() or price < 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Price must be a non-negative number",
        )
    return price


@router.get("/items", response_model=ItemListResponse)
def list_items(catalog: CatalogStore = Depends(get_catalog_store)) -> ItemListResponse:
    return ItemListResponse(items=catalog.list_items())


@router.get("/subjects", response_model=SubjectsResponse)
def list_subjects(catalog: CatalogStore = Depends(get_catalog_store)) -> SubjectsResponse:
    return SubjectsResponse(subjects=catalog.list_subjects())


@router.post("/admin/add-item", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
def add_item(
    title: str = Form(...),
    price: str = Form(...),
    desc: Optional[str] = Form(default=None),
    subject: Optional[str] = Form(default=None),
    new_subject_code: Optional[str] = Form(default=None),
    new_subject_name: Optional[str] = Form(default=None),
    file: Optional[UploadFile] = File(default=None),
    catalog: CatalogStore = Depends(get_catalog_store),
    _: AccessTokenData = Depends(require_admin),
) -> ItemResponse:
    parsed_price = _parse_price(price)
    new_subject = None
    if new_subject_code and new_subject_name:
        new_subject = (new_subject_code, new_subject_name)
    try:
        return catalog.add_item(
            title=title,
            price=parsed_price,
            description=desc,
            subject=subject,
            filename=file.filename if file is not None else None,
            content=file.file if file is not None else None,
            new_subject=new_subject,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.delete("/admin/remove-item/{item_id}", response_model=ItemRemovedResponse)
def remove_item(
    item_id: int,
    catalog: CatalogStore = Depends(get_catalog_store),
    _: AccessTokenData = Depends(require_admin),
) -> ItemRemovedResponse:
    try:
        file_deleted = catalog.remove_item(item_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    message = (
        "Item and associated file deleted successfully."
        if file_deleted
        else "Item deleted successfully."
    )
    return ItemRemovedResponse(message=message, file_deleted=file_deleted)


@router.post("/admin/add-subject", response_model=SubjectsResponse)
def add_subject(
    payload: SubjectCreate,
    catalog: CatalogStore = Depends(get_catalog_store),
    _: AccessTokenData = Depends(require_admin),
) -> SubjectsResponse:
    return SubjectsResponse(subjects=catalog.add_subject(payload.code, payload.name))
