import pytest

from settlement_sam.core.exceptions import SendFailedError
from settlement_sam.core.security import generate_verification_code
from settlement_sam.services import sms
from settlement_sam.services.email_service import MockEmailService


class FlakyEmailService(MockEmailService):
    """Rejects every address on the listed gateways."""

    def __init__(self, failing):
        super().__init__()
        self.failing = set(failing)

    async def send_email(self, to, subject, body, html=None, from_name=None):
        if to.split("@", 1)[1] in self.failing:
            raise ConnectionError("gateway down")
        return await super().send_email(to, subject, body, html, from_name)


@pytest.mark.parametrize("raw,expected", [
    ("(555) 123-4567", "5551234567"),
    ("+1 555 123 4567", "5551234567"),
    ("555.123.4567", "5551234567"),
    ("12345", "12345"),
    (None, ""),
])
def test_normalize_phone(raw, expected):
    assert sms.normalize_phone(raw) == expected


def test_phone_must_have_ten_digits():
    assert sms.is_valid_phone("5551234567")
    assert not sms.is_valid_phone("555123456")


def test_resolve_carrier():
    assert sms.resolve_carrier(None) == sms.MULTI_BLAST
    assert sms.resolve_carrier("") == sms.MULTI_BLAST
    assert sms.resolve_carrier("vtext.com") == "vtext.com"
    assert sms.resolve_carrier(sms.MULTI_BLAST) == sms.MULTI_BLAST
    assert sms.resolve_carrier("example.com") is None


def test_multi_blast_covers_eight_known_gateways():
    assert len(sms.MULTI_BLAST_GATEWAYS) == 8
    assert set(sms.MULTI_BLAST_GATEWAYS) <= set(sms.CARRIERS)


@pytest.mark.parametrize("length", [4, 5, 6])
def test_verification_code_length(length):
    for _ in range(20):
        code = generate_verification_code(length)
        assert len(code) == length
        assert code.isdigit()


def test_verification_code_length_bounds():
    with pytest.raises(ValueError):
        generate_verification_code(3)
    with pytest.raises(ValueError):
        generate_verification_code(7)


async def test_single_gateway_send():
    service = MockEmailService()
    await sms.send_sms_code(service, "5551234567", "vtext.com", "123456", "Ana")
    sent = service.get_last_email()
    assert sent["to"] == "5551234567@vtext.com"
    assert "123456" in sent["body"]
    assert "Hey Ana" in sent["body"]


async def test_single_gateway_failure_raises_send_failed():
    service = FlakyEmailService(["vtext.com"])
    with pytest.raises(SendFailedError):
        await sms.send_sms_code(service, "5551234567", "vtext.com", "123456")


async def test_multi_blast_succeeds_when_any_gateway_accepts():
    service = FlakyEmailService(sms.MULTI_BLAST_GATEWAYS[1:])
    accepted = await sms.send_sms_code_multi(service, "5551234567", "123456")
    assert accepted == 1
    assert len(service.sent_emails) == 1


async def test_multi_blast_fails_when_every_gateway_fails():
    service = FlakyEmailService(sms.MULTI_BLAST_GATEWAYS)
    with pytest.raises(SendFailedError):
        await sms.send_sms_code_multi(service, "5551234567", "123456")
