"""Identity, credit bureau and bank statement verification client"""

import asyncio
from datetime import date, timedelta
from typing import Any, Dict, Optional

import httpx

from fin5_gateway.config import settings
from fin5_gateway.domain.exceptions import VerificationAPIError
from fin5_gateway.domain.models import BankSignal, CreditReport, IdentityVerification, InflowTrend
from fin5_gateway.domain.validation import is_valid_aadhaar, is_valid_pan, mask_aadhaar, to_int, to_number
from fin5_gateway.infrastructure.observability.metrics import (
    verification_failures_counter,
    verification_latency_histogram,
)

STATEMENT_LOOKBACK_DAYS = 90


def _char_sum(value: str) -> int:
    return sum(ord(c) for c in value)


class VerificationClient:
    """
    Client for the external KYC / bureau / account-aggregator provider.

    With mock mode on, results are derived locally and deterministically
    from the inputs so development and demo environments need no provider.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        mock: bool | None = None,
    ):
        self.base_url = base_url or settings.verification_api_base
        self.api_key = api_key if api_key is not None else settings.verification_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.mock = settings.enable_mock_verification if mock is None else mock

    async def _post(self, operation: str, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST to the provider and return the `data` object of its response.

        Raises:
            VerificationAPIError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                with verification_latency_histogram.labels(operation=operation).time():
                    response = await client.post(
                        f"{self.base_url}{path}",
                        json=body,
                        headers={"Authorization": f"Bearer {self.api_key}"},
                    )
                response.raise_for_status()
                payload = response.json()
                data = payload.get("data", payload)
                if not isinstance(data, dict):
                    raise ValueError(f"expected object, got {type(data).__name__}")
                return data

            except httpx.TimeoutException as e:
                verification_failures_counter.labels(operation=operation).inc()
                raise VerificationAPIError(f"{operation} timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                verification_failures_counter.labels(operation=operation).inc()
                raise VerificationAPIError(f"{operation} error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                verification_failures_counter.labels(operation=operation).inc()
                raise VerificationAPIError(f"{operation} unavailable: {e}") from e
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                verification_failures_counter.labels(operation=operation).inc()
                raise VerificationAPIError(f"Invalid {operation} data from provider: {e}") from e

    async def verify_pan(self, pan: str) -> Dict[str, Any]:
        """Returns {"isValid", "name", "status"}"""
        if self.mock:
            return {"isValid": is_valid_pan(pan), "name": "MOCK USER NAME", "status": "ACTIVE"}
        return await self._post("pan", "/verification/pan", {"panNumber": pan})

    async def verify_aadhaar(self, aadhaar: str) -> Dict[str, Any]:
        """Returns {"isValid", "name", "status", "maskedAadhaar"}"""
        if self.mock:
            return {
                "isValid": is_valid_aadhaar(aadhaar),
                "name": "MOCK USER NAME",
                "status": "ACTIVE",
                "maskedAadhaar": mask_aadhaar(aadhaar),
            }
        return await self._post("aadhaar", "/verification/aadhaar", {"aadhaarNumber": aadhaar, "consent": True})

    async def verify_identity(self, pan: str, aadhaar: str) -> IdentityVerification:
        """Verify PAN and Aadhaar concurrently"""
        pan_result, aadhaar_result = await asyncio.gather(self.verify_pan(pan), self.verify_aadhaar(aadhaar))
        return IdentityVerification(
            pan_valid=bool(pan_result.get("isValid", False)),
            aadhaar_valid=bool(aadhaar_result.get("isValid", False)),
            pan_name=pan_result.get("name"),
            pan_status=pan_result.get("status"),
            aadhaar_name=aadhaar_result.get("name"),
            aadhaar_status=aadhaar_result.get("status"),
        )

    async def get_credit_report(self, pan: str, aadhaar: str) -> CreditReport:
        if self.mock:
            return CreditReport(
                credit_score=650 + _char_sum(pan or "") % 200,
                bureau_name="CIBIL",
                total_accounts=5,
                active_accounts=3,
                overdue_accounts=0,
            )

        data = await self._post("credit_report", "/credit/report", {"panNumber": pan, "aadhaarNumber": aadhaar})
        return CreditReport(
            credit_score=to_int(data.get("creditScore")),
            bureau_name=data.get("bureauName") or "Unknown",
            total_accounts=to_int(data.get("totalAccounts")),
            active_accounts=to_int(data.get("activeAccounts")),
            overdue_accounts=to_int(data.get("overdueAccounts")),
        )

    async def analyze_bank_statement(
        self,
        consent_handle: str = "",
        account_id: str = "",
        account_number: str = "",
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> BankSignal:
        """Summarise the last 90 days of the applicant's bank statement"""
        if self.mock:
            h = _char_sum(account_number or "0000000000")
            return BankSignal(
                monthly_inflow=75_000 + h % 50_000,
                monthly_outflow=45_000 + h % 30_000,
                average_balance=150_000 + h % 200_000,
                bounced_cheques=h % 3,
                inflow_trend=(InflowTrend.INCREASING, InflowTrend.DECREASING, InflowTrend.STABLE)[h % 3],
                salary_credits=1 + h % 2,
                emi_debits=h % 4,
            )

        to_date = to_date or date.today()
        from_date = from_date or to_date - timedelta(days=STATEMENT_LOOKBACK_DAYS)
        data = await self._post(
            "bank_statement",
            "/aa/analyze",
            {
                "consentHandle": consent_handle,
                "accountId": account_id,
                "fromDate": from_date.isoformat(),
                "toDate": to_date.isoformat(),
            },
        )
        return BankSignal(
            monthly_inflow=to_number(data.get("monthlyInflow")),
            monthly_outflow=to_number(data.get("monthlyOutflow")),
            average_balance=to_number(data.get("averageBalance")),
            bounced_cheques=to_int(data.get("bouncedCheques")),
            inflow_trend=InflowTrend.parse(data.get("inflowTrend")),
            salary_credits=to_int(data.get("salaryCredits")),
            emi_debits=to_int(data.get("emiDebits")),
        )
