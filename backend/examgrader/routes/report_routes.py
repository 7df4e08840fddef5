"""
Monthly report routes.

Endpoints:
- POST /api/reports/monthly
- GET /api/reports/{report_id}
- GET /api/students/{student_id}/reports
"""

import logging
from datetime import MAXYEAR
from typing import List

from fastapi import APIRouter, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..errors import GradingRequestError, InvalidRequestError, MissingFieldsError
from ..models import MonthlyReport, MonthlyReportRequest, MonthlyReportResponse
from ..services import MonthlyReportService
from ..services.records import find_student

logger = logging.getLogger(__name__)


def create_report_routes(db: AsyncIOMotorDatabase, llm_client) -> APIRouter:
    """Create report routes with database connection and Gemini client."""

    router = APIRouter(prefix="/api", tags=["reports"])
    reports = MonthlyReportService(db, llm_client)

    @router.post(
        "/reports/monthly",
        response_model=MonthlyReportResponse,
        response_model_exclude_none=True,
    )
    async def generate_monthly_report(request: MonthlyReportRequest):
        """Generate a student's report for one calendar month."""
        try:
            if not request.student_id or request.month is None or request.year is None:
                raise MissingFieldsError()
            if not 1 <= request.month <= 12:
                raise InvalidRequestError("Month must be between 1 and 12")
            # the month window ends at the first day of the following month
            if not 1 <= request.year <= MAXYEAR or (request.year, request.month) == (MAXYEAR, 12):
                raise InvalidRequestError("Year is out of range")

            report = await reports.generate(request.student_id, request.month, request.year)

            return MonthlyReportResponse(
                report_id=report.report_id,
                overall_percentage=report.overall_percentage,
                monthly_assessment=report.monthly_assessment,
                progress_evaluation=report.progress_evaluation,
                recommended_actions=report.recommended_actions,
                improvement_percentage=report.improvement_from_previous_month,
                subject_progress=report.subject_progress,
            )

        except GradingRequestError as e:
            raise HTTPException(status_code=e.status_code, detail=e.detail)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"❌ Error generating monthly report: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to generate monthly report")

    @router.get("/reports/{report_id}", response_model=MonthlyReport)
    async def get_report(report_id: str):
        """Get one monthly report."""
        doc = await db.monthly_reports.find_one({"report_id": report_id}, {"_id": 0})
        if not doc:
            raise HTTPException(status_code=404, detail="Report not found")
        return MonthlyReport.model_validate(doc)

    @router.get("/students/{student_id}/reports", response_model=List[MonthlyReport])
    async def list_student_reports(student_id: str):
        """List a student's monthly reports, most recent month first."""
        try:
            await find_student(db, student_id)
        except GradingRequestError as e:
            raise HTTPException(status_code=e.status_code, detail=e.detail)

        cursor = db.monthly_reports.find({"student_id": student_id}, {"_id": 0}).sort(
            [("year", -1), ("month", -1)]
        )
        return [MonthlyReport.model_validate(doc) for doc in await cursor.to_list(length=None)]

    return router
