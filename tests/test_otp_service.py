import pytest

from settlement_sam.core.exceptions import (
    InvalidInputError,
    TooManyRequestsError,
    TooManyAttemptsError,
    CodeExpiredError,
    InvalidCodeError,
    SendFailedError,
)
from settlement_sam.core.security import verify_token
from settlement_sam.services import sms
from settlement_sam.services.email_service import MockEmailService
from settlement_sam.services.otp_service import OTPService

PHONE = "(555) 123-4567"


class DeadEmailService(MockEmailService):
    async def send_email(self, to, subject, body, html=None, from_name=None):
        raise ConnectionError("smtp down")


@pytest.fixture
def otp(repos, test_settings, email_service, clock):
    return OTPService(repos, test_settings, email_service, clock)


def wrong_code(code: str) -> str:
    return "000000" if code != "000000" else "111111"


async def test_issue_sends_to_chosen_gateway(otp, email_service, clock):
    issued = await otp.issue(PHONE, "vtext.com", "Ana")

    assert len(issued.code) == 6
    assert issued.expires_at == clock.now.replace(minute=10)
    sent = email_service.get_last_email()
    assert sent["to"] == "5551234567@vtext.com"
    assert issued.code in sent["body"]


async def test_issue_without_carrier_blasts_all_gateways(otp, email_service):
    await otp.issue(PHONE)
    recipients = {e["to"] for e in email_service.sent_emails}
    assert recipients == {f"5551234567@{g}" for g in sms.MULTI_BLAST_GATEWAYS}


async def test_issue_rejects_bad_phone_and_carrier(otp):
    with pytest.raises(InvalidInputError):
        await otp.issue("555-1234", "vtext.com")
    with pytest.raises(InvalidInputError):
        await otp.issue(PHONE, "carrier.example")


async def test_fourth_send_within_hour_is_rate_limited(otp, clock):
    for _ in range(3):
        await otp.issue(PHONE, "vtext.com")
        clock.advance(minutes=5)

    with pytest.raises(TooManyRequestsError):
        await otp.issue(PHONE, "vtext.com")

    clock.advance(minutes=50)
    await otp.issue(PHONE, "vtext.com")


async def test_new_code_supersedes_previous(otp, repos):
    first = await otp.issue(PHONE, "vtext.com")
    second = await otp.issue(PHONE, "vtext.com")

    codes = await repos.codes.list_all()
    assert sum(1 for c in codes if not c.used) == 1

    if first.code != second.code:
        with pytest.raises(InvalidCodeError):
            await otp.verify(PHONE, first.code)
    result = await otp.verify(PHONE, second.code)
    assert result.ok


async def test_failed_send_removes_code(repos, test_settings, clock):
    otp = OTPService(repos, test_settings, DeadEmailService(), clock)

    for _ in range(4):
        with pytest.raises(SendFailedError):
            await otp.issue(PHONE, "vtext.com")

    assert await repos.codes.list_all() == []


async def test_verify_returns_phone_token(otp, test_settings):
    issued = await otp.issue(PHONE, "vtext.com")
    result = await otp.verify(PHONE, issued.code)

    assert result.ok
    assert result.phone == "5551234567"
    payload = verify_token(result.phone_token, "phone", test_settings)
    assert payload["phone"] == "5551234567"
    assert payload["verified"] is True


async def test_used_code_never_matches_again(otp):
    issued = await otp.issue(PHONE, "vtext.com")
    await otp.verify(PHONE, issued.code)

    with pytest.raises(CodeExpiredError):
        await otp.verify(PHONE, issued.code)


async def test_correct_code_after_four_wrong_attempts(otp):
    issued = await otp.issue(PHONE, "vtext.com")

    for remaining in (4, 3, 2, 1):
        with pytest.raises(InvalidCodeError) as exc:
            await otp.verify(PHONE, wrong_code(issued.code))
        assert exc.value.remaining_attempts == remaining

    assert (await otp.verify(PHONE, issued.code)).ok


async def test_locked_after_five_wrong_attempts(otp):
    issued = await otp.issue(PHONE, "vtext.com")

    for _ in range(5):
        with pytest.raises(InvalidCodeError):
            await otp.verify(PHONE, wrong_code(issued.code))

    with pytest.raises(TooManyAttemptsError):
        await otp.verify(PHONE, issued.code)


async def test_fresh_code_unlocks(otp, clock):
    issued = await otp.issue(PHONE, "vtext.com")
    for _ in range(5):
        with pytest.raises(InvalidCodeError):
            await otp.verify(PHONE, wrong_code(issued.code))

    fresh = await otp.issue(PHONE, "vtext.com")
    assert (await otp.verify(PHONE, fresh.code)).ok


async def test_expired_code(otp, clock):
    issued = await otp.issue(PHONE, "vtext.com")
    clock.advance(minutes=10, seconds=1)

    with pytest.raises(CodeExpiredError):
        await otp.verify(PHONE, issued.code)


async def test_verify_without_code_sent(otp):
    with pytest.raises(CodeExpiredError):
        await otp.verify(PHONE, "123456")


async def test_code_timestamps_round_trip_as_naive_utc(otp, repos, clock):
    issued = await otp.issue(PHONE, "vtext.com")

    stored = await repos.codes.get_active("5551234567", clock.now)
    assert stored.code == issued.code
    assert stored.created_at == clock.now
    assert stored.expires_at == issued.expires_at
    assert stored.created_at.tzinfo is None
