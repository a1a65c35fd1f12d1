"""
Email-to-SMS helpers: carrier gateways, phone normalisation and code dispatch.
Sending goes through the configured EmailService so tests can swap it out.
"""
import asyncio
import logging
import re
from typing import Optional

from settlement_sam.core.exceptions import SendFailedError
from settlement_sam.services.email_service import EmailService

logger = logging.getLogger(__name__)

# Gateway domain -> display label
CARRIERS = {
    "tmomail.net": "T-Mobile",
    "vtext.com": "Verizon",
    "txt.att.net": "AT&T",
    "sms.cricketwireless.net": "Cricket",
    "sms.myboostmobile.com": "Boost Mobile",
    "mymetropcs.com": "Metro PCS",
    "msg.fi.google.com": "Google Fi",
    "mailmymobile.net": "Consumer Cellular",
    "vsblmobile.com": "Visible",
    "tellomail.com": "Tello",
    "message.ting.com": "Ting",
    "text.republicwireless.com": "Republic Wireless",
    "messaging.sprintpcs.com": "Sprint",
    "email.uscc.net": "US Cellular",
    "mmst5.tracfone.com": "TracFone",
}

# "I'm not sure" carrier choice
MULTI_BLAST = "MULTI_BLAST"

# Blasted together when the carrier is unknown; any acceptance counts
MULTI_BLAST_GATEWAYS = (
    "txt.att.net",
    "vtext.com",
    "tmomail.net",
    "sms.cricketwireless.net",
    "sms.myboostmobile.com",
    "mymetropcs.com",
    "msg.fi.google.com",
    "mailmymobile.net",
)

VALID_GATEWAYS = frozenset(CARRIERS) | {MULTI_BLAST}


def normalize_phone(raw: Optional[str]) -> str:
    """Digits only, with a leading US country code dropped."""
    digits = re.sub(r"\D", "", str(raw or ""))
    if len(digits) == 11 and digits.startswith("1"):
        return digits[1:]
    return digits


def is_valid_phone(phone: str) -> bool:
    return len(phone) == 10


def resolve_carrier(carrier: Optional[str]) -> Optional[str]:
    """Gateway to use, MULTI_BLAST when unknown, None when not a gateway we know."""
    if not carrier:
        return MULTI_BLAST
    if carrier in VALID_GATEWAYS:
        return carrier
    return None


def gateway_address(phone: str, gateway: str) -> str:
    return f"{phone}@{gateway}"


def sms_text(code: str, name: Optional[str] = None) -> str:
    return f"Hey {name or 'there'}, it's Settlement Sam! Your code is {code}. Your case info is safe with me."


async def send_sms_code(
    email_service: EmailService,
    phone: str,
    gateway: str,
    code: str,
    name: Optional[str] = None
) -> None:
    """Send through a single carrier gateway. Raises SendFailedError on failure."""
    try:
        await email_service.send_email(gateway_address(phone, gateway), "", sms_text(code, name))
    except Exception as e:
        logger.error("SMS gateway %s rejected code for %s: %s", gateway, phone, e)
        raise SendFailedError() from e


async def send_sms_code_multi(
    email_service: EmailService,
    phone: str,
    code: str,
    name: Optional[str] = None
) -> int:
    """
    Blast every common gateway at once.
    Returns how many accepted; raises SendFailedError only when all failed.
    """
    text = sms_text(code, name)
    results = await asyncio.gather(
        *(
            email_service.send_email(gateway_address(phone, gateway), "", text)
            for gateway in MULTI_BLAST_GATEWAYS
        ),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, Exception)]
    succeeded = len(results) - len(failures)
    logger.info("Multi-blast for %s: %d/%d gateways accepted", phone, succeeded, len(results))
    if failures:
        logger.warning("Gateway error sample: %s", failures[0])

    if succeeded == 0:
        raise SendFailedError()
    return succeeded
