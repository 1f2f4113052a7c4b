from fastapi import APIRouter, Depends, HTTPException, status

from app.database import Database, get_db
from app.schemas.engagement import FeedbackCreate, NewsletterSubscribe
from app.services import engagement_service
from app.utils.response import create_response, handle_exception

router = APIRouter(prefix="/api", tags=["Engagement"])


@router.post("/feedback")
def submit_feedback(body: FeedbackCreate, db: Database = Depends(get_db)):
    try:
        if not (body.name and body.email and body.feedback):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields")

        engagement_service.record_feedback(db, body.name, body.email, body.feedback)
        return create_response({"success": True})
    except Exception as exc:
        return handle_exception(exc, "Failed to save feedback")


@router.post("/newsletter")
def subscribe_newsletter(body: NewsletterSubscribe, db: Database = Depends(get_db)):
    try:
        engagement_service.subscribe_newsletter(db, str(body.email))
        return create_response({"success": True})
    except Exception as exc:
        return handle_exception(exc, "Failed to save email")
