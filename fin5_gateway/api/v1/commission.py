"""POST /v1/commission/calculate and GET /v1/commission/history - dealer commission engine"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from fin5_gateway.api.dependencies import get_commission_config, get_request_id
from fin5_gateway.api.v1.schemas import (
    CommissionBreakdownSchema,
    CommissionHistoryItem,
    CommissionHistoryResponse,
    CommissionRequest,
    CommissionResponse,
    CommissionSummarySchema,
    PayoutSchema,
    PerformanceBonusSchema,
)
from fin5_gateway.domain.commission import (
    CommissionConfig,
    apply_gst,
    calculate_commission,
    calculate_payout,
    calculate_performance_bonus,
    lender_display_name,
)
from fin5_gateway.infrastructure.database.repositories import CommissionRepository
from fin5_gateway.infrastructure.database.session import get_db
from fin5_gateway.infrastructure.observability.logging import log_commission
from fin5_gateway.infrastructure.observability.metrics import record_commission

router = APIRouter()


@router.post("/commission/calculate", response_model=CommissionResponse)
def create_commission(
    request_body: CommissionRequest,
    request: Request,
    db: Session = Depends(get_db),
    config: CommissionConfig = Depends(get_commission_config),
):
    """
    Calculate and record the commission on a dealer-sourced loan.

    Flow:
    1. Split the lender's commission between dealer and platform
    2. Apply GST to the platform's share
    3. Add the dealer's monthly performance bonus
    4. Persist the record (pending payout) and return the payout estimate
    """
    request_id = get_request_id(request)
    commission_repo = CommissionRepository(db)

    try:
        split = calculate_commission(request_body.loan_amount, request_body.lender_id, request_body.dealer_plan, config)
        gst = apply_gst(split.platform_commission, config.gst_rate)

        # Stats reported by the dealer portal win over what we have on record
        if request_body.monthly_stats is not None:
            stats = request_body.monthly_stats
            applications, approval_rate, volume = stats.applications, stats.approval_rate, stats.total_loan_amount
        else:
            recorded = commission_repo.monthly_stats(request_body.dealer_id)
            applications, approval_rate, volume = recorded.applications, 0.0, recorded.total_loan_amount

        bonus = calculate_performance_bonus(applications, approval_rate, volume, split.dealer_commission, config)
        payout = calculate_payout(request_body.dealer_id, split.dealer_plan, bonus.total_amount, config=config)

        breakdown = CommissionBreakdownSchema(
            total_commission=split.total_commission,
            dealer_commission_gross=split.dealer_commission_gross,
            platform_commission_gross=split.platform_commission_gross,
            dealer_processing_fee=split.dealer_processing_fee,
            platform_processing_fee=split.platform_processing_fee,
            dealer_commission=split.dealer_commission,
            platform_commission=split.platform_commission,
            gst_amount=gst.gst_amount,
            net_platform_commission=gst.net_platform_commission,
        )

        db_record = commission_repo.create_record(
            application_id=request_body.application_id,
            dealer_id=request_body.dealer_id,
            split=split,
            gst=gst,
            bonus=bonus,
            breakdown=breakdown.model_dump(),
        )
        db.commit()

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_commission(split.dealer_plan.value, split.dealer_commission, split.platform_commission, split.used_default_rate)
    log_commission(request_id, request_body.dealer_id, split.lender_id, split.total_commission, split.used_default_rate)

    return CommissionResponse(
        record_id=str(db_record.id),
        application_id=request_body.application_id,
        dealer_id=request_body.dealer_id,
        dealer_plan=split.dealer_plan,
        lender_id=split.lender_id,
        lender_name=lender_display_name(split.lender_id),
        loan_amount=split.loan_amount,
        commission_rate=split.commission_rate,
        used_default_rate=split.used_default_rate,
        commission_breakdown=breakdown,
        performance_bonus=PerformanceBonusSchema(
            bonus_rate=bonus.bonus_rate,
            bonus_amount=bonus.bonus_amount,
            total_dealer_commission=bonus.total_amount,
        ),
        payout=PayoutSchema(
            frequency=payout.frequency,
            processing_days=payout.processing_days,
            estimated_payout_date=payout.estimated_payout_date,
        ),
        status=db_record.status,
    )


@router.get("/commission/history", response_model=CommissionHistoryResponse)
def get_commission_history(
    dealer_id: Optional[str] = Query(None, description="Dealer identifier"),
    lender_id: Optional[str] = Query(None, description="Lender identifier"),
    status: Optional[str] = Query(None, description="Record status, e.g. pending or paid"),
    start_date: Optional[date] = Query(None, description="Created on or after (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="Created on or before (YYYY-MM-DD)"),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """
    Commission records matching the filters, newest first, with totals.

    Every filter is optional. The summary covers all matching records, not
    only the returned page.
    """
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")

    filters = {
        "dealer_id": dealer_id,
        "lender_id": lender_id,
        "status": status,
        "start_date": start_date,
        "end_date": end_date,
    }
    commission_repo = CommissionRepository(db)
    records = commission_repo.find_records(limit=limit, **filters)
    totals = commission_repo.summarize(**filters)

    return CommissionHistoryResponse(
        **filters,
        records=[
            CommissionHistoryItem(
                record_id=str(r.id),
                application_id=r.application_id,
                dealer_id=r.dealer_id,
                lender_id=r.lender_id,
                loan_amount=r.loan_amount,
                dealer_commission=r.dealer_commission,
                bonus_amount=r.bonus_amount,
                status=r.status,
                created_at=r.created_at.isoformat(),
            )
            for r in records
        ],
        summary=CommissionSummarySchema(
            total_records=totals.record_count,
            total_commission=totals.total_commission,
            dealer_commission=totals.dealer_commission,
            platform_commission=totals.platform_commission,
            gst_amount=totals.gst_amount,
            bonus_amount=totals.bonus_amount,
            commission_by_status=totals.by_status,
        ),
    )
