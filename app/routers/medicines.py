from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from app.database import Database, get_db
from app.services import listing_service
from app.services.auth_middleware import get_current_professional
from app.services.image_storage import ImageRejected, ImageStorage, get_image_storage
from app.services.listing_service import ListingValidationError
from app.utils.response import create_response, handle_exception

router = APIRouter(prefix="/api/medicines", tags=["Medicines"])


@router.get("")
def list_medicines(
    db: Database = Depends(get_db),
    images: ImageStorage = Depends(get_image_storage),
):
    try:
        listings = listing_service.list_approved(db)
        return create_response([listing_service.to_public(listing, images) for listing in listings])
    except Exception as exc:
        return handle_exception(exc, "Failed to read medicines data")


@router.post("")
def create_medicine(
    name: str | None = Form(None),
    expiry: str | None = Form(None),
    condition: str | None = Form(None),
    price: str | None = Form(None),
    image: UploadFile | None = File(None),
    db: Database = Depends(get_db),
    images: ImageStorage = Depends(get_image_storage),
):
    try:
        stored_name = None
        if image is not None and image.filename:
            # never pull more than one byte past the limit into memory
            contents = image.file.read(images.max_bytes + 1)
            try:
                stored_name = images.save(contents, image.filename, image.content_type)
            except ImageRejected as exc:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

        try:
            listing = listing_service.submit(
                db,
                images,
                name=name,
                expiry=expiry,
                condition=condition,
                price=price,
                image=stored_name,
            )
        except ListingValidationError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

        return create_response(
            {
                "success": True,
                "message": "Medicine added successfully, pending pharmacist approval",
                "medicine": listing_service.to_public(listing, images),
            },
            status_code=status.HTTP_201_CREATED,
        )
    except Exception as exc:
        return handle_exception(exc, "Failed to add medicine")


@router.get("/pending")
def list_pending_medicines(
    _: dict = Depends(get_current_professional),
    db: Database = Depends(get_db),
    images: ImageStorage = Depends(get_image_storage),
):
    try:
        listings = listing_service.list_pending(db)
        return create_response([listing_service.to_public(listing, images) for listing in listings])
    except Exception as exc:
        return handle_exception(exc, "Failed to read medicines data")


@router.post("/{listing_id}/approve")
def approve_medicine(
    listing_id: str,
    _: dict = Depends(get_current_professional),
    db: Database = Depends(get_db),
):
    try:
        if not listing_service.approve(db, listing_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")
        return create_response({"success": True})
    except Exception as exc:
        return handle_exception(exc, "Failed to approve listing")


@router.post("/{listing_id}/reject")
def reject_medicine(
    listing_id: str,
    _: dict = Depends(get_current_professional),
    db: Database = Depends(get_db),
):
    try:
        if not listing_service.reject(db, listing_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")
        return create_response({"success": True})
    except Exception as exc:
        return handle_exception(exc, "Failed to reject listing")
