from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from stockledger.dependencies import get_db
from stockledger.services.report_export import report_to_xlsx_bytes
from stockledger.services.valuation_service import valuate

router = APIRouter(prefix="/transactions", tags=["Transactions"])

_XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("")
def item_transactions(
    item_id: int = Query(None, alias="itemId"),
    user_id: int = Query(None, alias="userId"),
    from_date: str = Query(None, alias="fromDate"),
    to_date: str = Query(None, alias="toDate"),
    db: Session = Depends(get_db),
):
    return valuate(db, item_id=item_id, user_id=user_id, from_date=from_date, to_date=to_date)


@router.get("/export")
def export_transactions(
    item_id: int = Query(None, alias="itemId"),
    user_id: int = Query(None, alias="userId"),
    from_date: str = Query(None, alias="fromDate"),
    to_date: str = Query(None, alias="toDate"),
    db: Session = Depends(get_db),
):
    report = valuate(db, item_id=item_id, user_id=user_id, from_date=from_date, to_date=to_date)
    title = "Item {} stock report {} to {}".format(item_id, from_date, to_date)
    filename = "stock-report-{}-{}-{}.xlsx".format(item_id, from_date, to_date)
    return Response(
        content=report_to_xlsx_bytes(report, title=title),
        media_type=_XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(filename)},
    )
