from pydantic import BaseModel, Field
from typing import Optional, List, Dict

"""
CONTACT ROUTE SCHEMA
"""


#Raw contact form body, nothing is trusted until it passes validation
class ContactSubmission(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None
    company: Optional[str] = None
    honeypot: Optional[str] = Field(default=None, alias="_honeypot")


#Response returned by POST /api/contact
class ContactResult(BaseModel):
    success: bool
    message: Optional[str] = None
    dryRun: Optional[bool] = None
    envPresence: Optional[Dict[str, bool]] = None


#Descriptive metadata returned by GET /api/contact
class ContactInfoOut(BaseModel):
    endpoint: str = "/api/contact"
    method: str = "POST"
    requiredFields: List[str] = ["name", "email", "subject", "message"]
    optionalFields: List[str] = ["company", "_honeypot"]
    status: str = "Ready"
    dryRun: bool
    envPresence: Optional[Dict[str, bool]] = None
    hint: str = (
        "Send a POST request with JSON body to this endpoint "
        "to submit a contact message."
    )


class VerifyOut(BaseModel):
    success: bool
    elapsedMs: int
    portTried: int


class HealthOut(BaseModel):
    status: str = "ok"
    timestamp: int
