"""
Offers API endpoints.

An offer is owned through its store: every lookup joins Offer to Store and
filters on the authenticated user, and any break in that chain is reported
as not found. Offer create and update accept JSON or multipart bodies; in
multipart bodies the images travel as ``offerImages`` file parts.
"""
from typing import Any
import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from simplishare.api.v1.stores import get_owned_store
from simplishare.core.config import Settings, get_settings
from simplishare.core.database import get_db
from simplishare.core.responses import success_response
from simplishare.core.security import get_current_user_id
from simplishare.core.validation import field_error, validate_payload
from simplishare.exceptions import BadRequestError, ErrorCode, ResourceNotFoundError
from simplishare.logging_config import get_logger
from simplishare.models.offer import Offer
from simplishare.models.store import Store
from simplishare.schemas.offer import OfferCreate, OfferUpdate, OfferCreated, OfferResponse
from simplishare.storage import ImageBucket, get_image_bucket

router = APIRouter(prefix="/offers", tags=["Offers"])
logger = get_logger("api.offers")

IMAGE_FIELD = "offerImages"


async def read_offer_payload(request: Request) -> tuple[dict[str, Any], list[UploadFile]]:
    """Split the body into plain fields and uploaded image files."""
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("multipart/form-data") or content_type.startswith(
        "application/x-www-form-urlencoded"
    ):
        form = await request.form()
        fields: dict[str, Any] = {}
        images: list[UploadFile] = []
        for key, value in form.multi_items():
            if key == IMAGE_FIELD and isinstance(value, UploadFile):
                images.append(value)
            else:
                fields[key] = value
        return fields, images

    body = await request.body()
    if not body:
        return {}, []
    try:
        return await request.json(), []
    except ValueError:
        raise BadRequestError("Request body must be valid JSON.")


def check_image_count(images: list[UploadFile], limit: int) -> None:
    if len(images) > limit:
        raise field_error(IMAGE_FIELD, "too_long", max_length=limit, actual_length=len(images))


async def upload_images(bucket: ImageBucket, images: list[UploadFile]) -> list[str]:
    """Upload one file at a time; a failure removes what was already stored."""
    image_ids: list[str] = []
    try:
        for image in images:
            image_ids.append(await bucket.upload(image))
    except Exception:
        await bucket.delete_many(image_ids)
        raise
    return image_ids


async def get_owned_offer(db: AsyncSession, offer_id: uuid.UUID, user_id: uuid.UUID) -> Offer | None:
    result = await db.execute(
        select(Offer)
        .join(Store, Offer.store_id == Store.id)
        .where(Offer.id == offer_id, Store.user_id == user_id)
    )
    return result.scalar_one_or_none()


@router.get("/image/{file_id}")
async def get_image(
    file_id: str,
    bucket: ImageBucket = Depends(get_image_bucket),
):
    """Stream a stored offer image."""
    record, chunks = await bucket.open_download_stream(file_id)
    return StreamingResponse(
        chunks,
        media_type=record.content_type or "application/octet-stream",
        headers={"Content-Length": str(record.length)},
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_offer(
    request: Request,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    bucket: ImageBucket = Depends(get_image_bucket),
    settings: Settings = Depends(get_settings),
):
    """
    Create an offer on one of the caller's stores.

    Up to MAX_OFFER_IMAGES images may be attached; larger sets are refused
    before anything is uploaded.
    """
    fields, images = await read_offer_payload(request)
    check_image_count(images, settings.max_offer_images)
    offer_data = validate_payload(OfferCreate, fields)

    store = await get_owned_store(db, offer_data.store, user_id)
    if store is None:
        raise ResourceNotFoundError(
            "Store not found or you do not have permission to add an offer to it.",
            ErrorCode.STORE_NOT_FOUND,
        )

    image_ids = await upload_images(bucket, images)

    new_offer = Offer(
        store_id=store.id,
        offer_images=image_ids,
        **offer_data.model_dump(exclude={"store"}),
    )
    db.add(new_offer)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        await bucket.delete_many(image_ids)
        raise

    logger.info(f"Offer {new_offer.id} created on store {store.id} with {len(image_ids)} images")
    data = OfferCreated(offer_id=new_offer.id, offer_title=new_offer.offer_title)
    return success_response(request, status.HTTP_201_CREATED, "Offer has been successfully added.", data)


@router.get("")
async def list_offers(
    request: Request,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """List offers across all of the caller's stores."""
    result = await db.execute(
        select(Offer)
        .join(Store, Offer.store_id == Store.id)
        .where(Store.user_id == user_id)
        .order_by(Offer.created_at)
    )
    offers = [OfferResponse.dump(offer) for offer in result.scalars().all()]
    return success_response(request, status.HTTP_200_OK, "Offers fetched successfully.", offers)


@router.put("/{offer_id}")
async def update_offer(
    request: Request,
    offer_id: uuid.UUID,
    background_tasks: BackgroundTasks,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    bucket: ImageBucket = Depends(get_image_bucket),
    settings: Settings = Depends(get_settings),
):
    """
    Update an offer the caller owns.

    New images replace the old set; the old blobs are removed only after
    the update is committed, and failing to remove them does not fail the
    request.
    """
    offer = await get_owned_offer(db, offer_id, user_id)
    if offer is None:
        raise ResourceNotFoundError(
            "Offer not found or you do not have permission to update it.",
            ErrorCode.OFFER_NOT_FOUND,
        )

    fields, images = await read_offer_payload(request)
    check_image_count(images, settings.max_offer_images)

    changes: dict[str, Any] = {}
    if fields or not images:
        update = validate_payload(OfferUpdate, fields)
        changes = update.model_dump(exclude_unset=True)

    if "store" in changes:
        store = await get_owned_store(db, changes["store"], user_id)
        if store is None:
            raise ResourceNotFoundError(
                "Store not found or you do not have permission to add an offer to it.",
                ErrorCode.STORE_NOT_FOUND,
            )
        changes["store_id"] = changes.pop("store")

    stale_images: list[str] = []
    if images:
        stale_images = list(offer.offer_images or [])
        changes["offer_images"] = await upload_images(bucket, images)

    for field, value in changes.items():
        setattr(offer, field, value)

    try:
        await db.commit()
    except Exception:
        await db.rollback()
        await bucket.delete_many(changes.get("offer_images", []))
        raise

    if stale_images:
        background_tasks.add_task(bucket.delete_many, stale_images)

    await db.refresh(offer)
    return success_response(request, status.HTTP_200_OK, "Offer updated successfully.", OfferResponse.dump(offer))


@router.delete("/{offer_id}")
async def delete_offer(
    request: Request,
    offer_id: uuid.UUID,
    background_tasks: BackgroundTasks,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    bucket: ImageBucket = Depends(get_image_bucket),
):
    """Delete an offer the caller owns; its images are removed afterwards."""
    offer = await get_owned_offer(db, offer_id, user_id)
    if offer is None:
        raise ResourceNotFoundError(
            "Offer not found or you do not have permission to delete it.",
            ErrorCode.OFFER_NOT_FOUND,
        )

    image_ids = list(offer.offer_images or [])
    await db.delete(offer)
    await db.commit()

    if image_ids:
        background_tasks.add_task(bucket.delete_many, image_ids)

    logger.info(f"Offer {offer_id} deleted by user {user_id}")
    return success_response(request, status.HTTP_200_OK, "Offer deleted successfully.")
