"""Unit tests for the verification client"""

import httpx
import pytest
from unittest.mock import AsyncMock, patch
from fin5_gateway.domain.exceptions import VerificationAPIError
from fin5_gateway.domain.models import InflowTrend
from fin5_gateway.infrastructure.clients.verification import VerificationClient

PROVIDER_URL = "https://verify.test/api"


def _response(status_code: int, json: dict) -> httpx.Response:
    return httpx.Response(status_code, json=json, request=httpx.Request("POST", PROVIDER_URL))


async def test_mock_identity_checks_patterns():
    client = VerificationClient(mock=True)

    identity = await client.verify_identity("ABCDE1234F", "12345")

    assert identity.pan_valid is True
    assert identity.aadhaar_valid is False
    assert identity.pan_status == "ACTIVE"


async def test_mock_aadhaar_is_masked():
    client = VerificationClient(mock=True)

    result = await client.verify_aadhaar("123456789012")

    assert result["maskedAadhaar"] == "1234****9012"


async def test_mock_credit_report_is_deterministic():
    client = VerificationClient(mock=True)

    report = await client.get_credit_report("ABCDE1234F", "123456789012")

    # sum(ord(c)) = 607 -> 650 + 607 % 200
    assert report.credit_score == 657
    assert report.bureau_name == "CIBIL"
    assert report == await client.get_credit_report("ABCDE1234F", "")


async def test_mock_bank_statement_from_account_number():
    client = VerificationClient(mock=True)

    signal = await client.analyze_bank_statement(account_number="")

    # "0000000000" hashes to 480
    assert signal.monthly_inflow == 75_480
    assert signal.monthly_outflow == 45_480
    assert signal.bounced_cheques == 0
    assert signal.inflow_trend == InflowTrend.INCREASING


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_credit_report_parses_provider_payload(mock_post: AsyncMock):
    mock_post.return_value = _response(
        200,
        {"data": {"creditScore": "742", "bureauName": "Experian", "totalAccounts": 4, "overdueAccounts": None}},
    )
    client = VerificationClient(base_url=PROVIDER_URL, api_key="key", mock=False)

    report = await client.get_credit_report("ABCDE1234F", "123456789012")

    assert report.credit_score == 742
    assert report.bureau_name == "Experian"
    assert report.total_accounts == 4
    assert report.overdue_accounts == 0
    assert mock_post.call_args.kwargs["headers"] == {"Authorization": "Bearer key"}


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_bank_statement_trend_alias(mock_post: AsyncMock):
    mock_post.return_value = _response(200, {"data": {"monthlyInflow": 90_000, "inflowTrend": "rising"}})
    client = VerificationClient(base_url=PROVIDER_URL, mock=False)

    signal = await client.analyze_bank_statement(consent_handle="c-1", account_id="a-1")

    assert signal.monthly_inflow == 90_000
    assert signal.inflow_trend == InflowTrend.INCREASING
    body = mock_post.call_args.kwargs["json"]
    assert body["consentHandle"] == "c-1"
    assert "fromDate" in body and "toDate" in body


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_timeout_raises_verification_error(mock_post: AsyncMock):
    mock_post.side_effect = httpx.TimeoutException("timed out")
    client = VerificationClient(base_url=PROVIDER_URL, mock=False)

    with pytest.raises(VerificationAPIError, match="timeout"):
        await client.verify_pan("ABCDE1234F")


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_http_error_raises_verification_error(mock_post: AsyncMock):
    mock_post.return_value = _response(502, {"error": "bad gateway"})
    client = VerificationClient(base_url=PROVIDER_URL, mock=False)

    with pytest.raises(VerificationAPIError, match="502"):
        await client.get_credit_report("ABCDE1234F", "123456789012")


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_malformed_payload_raises_verification_error(mock_post: AsyncMock):
    mock_post.return_value = _response(200, {"data": ["not", "an", "object"]})
    client = VerificationClient(base_url=PROVIDER_URL, mock=False)

    with pytest.raises(VerificationAPIError, match="Invalid"):
        await client.verify_aadhaar("123456789012")
