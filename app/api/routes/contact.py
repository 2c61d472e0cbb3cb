from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from app.api.deps import (
    get_settings,
    get_mail_config,
    get_mail_transport,
    debug_requested,
    contact_rate_limit,
)
from app.core.config import Settings, MailTransportConfig
from app.schemas.contact import ContactSubmission, ContactResult, ContactInfoOut, VerifyOut
from app.services.email import MailTransport, dispatch, verify_transport
from app.services.validation import validate_submission

router = APIRouter(
    prefix="/contact",
    tags=["Contact"],
)

"""
CONTACT ROUTES => PUBLIC CONTACT FORM RELAY

1) GET  /contact        => ENDPOINT METADATA + DRY RUN STATUS
2) POST /contact        => VALIDATE, THEN RELAY BY EMAIL (RATE LIMIT 10 / IP / 15 MINUTES)
3) GET  /contact/verify => SMTP HANDSHAKE DIAGNOSTIC (ONLY WHEN ENABLED)
"""


#Describe the endpoint so a browser GET does not hit a 405
@router.get("", response_model=ContactInfoOut, response_model_exclude_none=True)
def contact_info(
    config: MailTransportConfig = Depends(get_mail_config),
    debug: bool = Depends(debug_requested),
):
    return ContactInfoOut(
        dryRun=not config.is_complete,
        envPresence=config.presence() if debug else None,
    )


#Public contact form submission
@router.post(
    "",
    response_model=ContactResult,
    response_model_exclude_none=True,
    dependencies=[Depends(contact_rate_limit)],
)
def submit_contact(
    payload: ContactSubmission,
    config: MailTransportConfig = Depends(get_mail_config),
    transport: MailTransport = Depends(get_mail_transport),
    debug: bool = Depends(debug_requested),
):
    submission = validate_submission(payload)
    if submission is None:
        return ContactResult(success=True, message="Thank you.")

    outcome = dispatch(submission, config, transport, debug=debug)

    if outcome.dry_run:
        return ContactResult(
            success=True,
            dryRun=True,
            message="Dry run success (configure SMTP to actually send).",
            envPresence=outcome.env_presence,
        )

    return ContactResult(success=True, message="Message sent successfully.")


#Check the relay accepts a connection and login, without sending anything
@router.get("/verify", response_model=VerifyOut)
def verify_contact_transport(
    settings: Settings = Depends(get_settings),
    config: MailTransportConfig = Depends(get_mail_config),
    transport: MailTransport = Depends(get_mail_transport),
):
    if not settings.CONTACT_VERIFY_ENABLED:
        raise HTTPException(status_code=404, detail="Not Found")

    if not (config.host and config.username and config.password.strip()):
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Missing SMTP env vars."},
        )

    result = verify_transport(config, transport)

    if not result.success:
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": str(result.error),
                "code": result.error.code,
                "elapsedMs": result.elapsed_ms,
            },
        )

    return VerifyOut(success=True, elapsedMs=result.elapsed_ms, portTried=result.port)
