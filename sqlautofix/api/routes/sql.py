"""
SQL auto-fix endpoints

Called by the query editor before a query is executed: /fix returns the
proposed correction and whether it may be applied without asking, /format
pretty-prints an accepted query.
"""

from fastapi import APIRouter, HTTPException
from loguru import logger

from sqlautofix.api.schemas import FixRequest, FixResponse, FormatRequest, FormatResponse
from sqlautofix.sql.correction import SchemaSnapshot, review_query
from sqlautofix.sql.formatter import format_sql
from sqlautofix.utils.errors import SchemaSnapshotError


router = APIRouter(prefix="/api/sql", tags=["sql"])


@router.post("/fix", response_model=FixResponse)
def fix_query(request: FixRequest) -> FixResponse:
    """
    Propose a corrected query and apply the auto-accept policy

    Args:
        request: SQL plus the schema snapshot of the connected database

    Returns:
        FixResponse with the fixes and the policy decision

    Raises:
        HTTPException: 400 if the schema snapshot is malformed
    """
    try:
        snapshot = SchemaSnapshot.from_dict(request.tables)
    except SchemaSnapshotError as e:
        logger.warning(f"Rejected fix request with malformed schema: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    logger.debug(f"Fix request: {request.sql[:100]}")
    review = review_query(request.sql, snapshot, policy=request.auto_accept)

    return FixResponse.from_result(
        review.result,
        sql=review.sql,
        needs_confirmation=review.needs_confirmation,
        auto_applied=review.auto_applied,
    )


@router.post("/format", response_model=FormatResponse)
def format_query(request: FormatRequest) -> FormatResponse:
    """Pretty-print SQL; unparseable input comes back unchanged"""
    formatted = format_sql(request.sql, dialect=request.dialect, indent=request.indent)
    return FormatResponse(sql=formatted, changed=formatted != request.sql)
