from pydantic import BaseModel, EmailStr


class FeedbackCreate(BaseModel):
    name: str | None = None
    email: str | None = None
    feedback: str | None = None


class NewsletterSubscribe(BaseModel):
    email: EmailStr
