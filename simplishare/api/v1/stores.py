"""
Stores API endpoints. Every query is filtered by the authenticated owner, so
a store that belongs to someone else looks exactly like a missing one.
"""
import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from simplishare.core.database import get_db
from simplishare.core.responses import success_response
from simplishare.core.security import get_current_user_id
from simplishare.error_handlers import duplicate_field
from simplishare.exceptions import DuplicateEntryError, ErrorCode, ResourceNotFoundError
from simplishare.logging_config import get_logger
from simplishare.models.offer import Offer
from simplishare.models.store import Store
from simplishare.schemas.store import StoreCreate, StoreUpdate, StoreCreated, StoreResponse
from simplishare.storage import ImageBucket, get_image_bucket

router = APIRouter(prefix="/stores", tags=["Stores"])
logger = get_logger("api.stores")

DUPLICATE_STORE_MESSAGE = "A store with this email is already in use."


async def get_owned_store(db: AsyncSession, store_id: uuid.UUID, user_id: uuid.UUID) -> Store | None:
    result = await db.execute(
        select(Store).where(Store.id == store_id, Store.user_id == user_id)
    )
    return result.scalar_one_or_none()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_store(
    request: Request,
    store_data: StoreCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a new store for the authenticated user.

    - **email_id**: Store contact email, unique across stores
    - **pincode**: Six digits
    """
    new_store = Store(user_id=user_id, **store_data.model_dump())
    db.add(new_store)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        if duplicate_field(exc) is None:
            raise
        raise DuplicateEntryError(DUPLICATE_STORE_MESSAGE)

    logger.info(f"Store {new_store.id} created for user {user_id}")
    data = StoreCreated(store_id=new_store.id, store_name=new_store.store_name)
    return success_response(request, status.HTTP_201_CREATED, "Store has been successfully added.", data)


@router.get("")
async def list_stores(
    request: Request,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """List the authenticated user's stores."""
    result = await db.execute(
        select(Store).where(Store.user_id == user_id).order_by(Store.created_at)
    )
    stores = [StoreResponse.model_validate(store) for store in result.scalars().all()]
    return success_response(request, status.HTTP_200_OK, "Stores fetched successfully.", stores)


@router.put("/{store_id}")
async def update_store(
    request: Request,
    store_id: uuid.UUID,
    store_update: StoreUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Update the given fields of a store the caller owns."""
    store = await get_owned_store(db, store_id, user_id)
    if store is None:
        raise ResourceNotFoundError(
            "Store not found or you do not have permission to update it.",
            ErrorCode.STORE_NOT_FOUND,
        )

    for field, value in store_update.model_dump(exclude_unset=True).items():
        setattr(store, field, value)

    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        if duplicate_field(exc) is None:
            raise
        raise DuplicateEntryError(DUPLICATE_STORE_MESSAGE)

    await db.refresh(store)
    return success_response(
        request,
        status.HTTP_200_OK,
        "Store updated successfully.",
        StoreResponse.model_validate(store),
    )


@router.delete("/{store_id}")
async def delete_store(
    request: Request,
    store_id: uuid.UUID,
    background_tasks: BackgroundTasks,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    bucket: ImageBucket = Depends(get_image_bucket),
):
    """Delete a store the caller owns together with its offers."""
    store = await get_owned_store(db, store_id, user_id)
    if store is None:
        raise ResourceNotFoundError(
            "Store not found or you do not have permission to delete it.",
            ErrorCode.STORE_NOT_FOUND,
        )

    result = await db.execute(select(Offer.offer_images).where(Offer.store_id == store.id))
    image_ids = [image_id for images in result.scalars().all() for image_id in images or []]

    await db.execute(delete(Offer).where(Offer.store_id == store.id))
    await db.delete(store)
    await db.commit()

    if image_ids:
        background_tasks.add_task(bucket.delete_many, image_ids)

    logger.info(f"Store {store_id} deleted by user {user_id}")
    return success_response(request, status.HTTP_200_OK, "Store deleted successfully.")
