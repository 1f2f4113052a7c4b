from pydantic import BaseModel


class Feedback(BaseModel):
    name: str = ""
    email: str = ""
    feedback: str = ""
    timestamp: str = ""


class NewsletterSubscription(BaseModel):
    email: str = ""
    timestamp: str = ""
