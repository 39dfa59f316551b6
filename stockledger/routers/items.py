from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from stockledger.dependencies import get_db
from stockledger.schemas.item import (
    BarcodeLookup,
    ItemCreate,
    ItemDetailsCreate,
    ItemDetailsRead,
    ItemPriceUpdate,
    ItemRead,
    ItemWithDetails,
)
from stockledger.services.item_service import (
    create_item,
    create_item_details,
    delete_item,
    get_item_details,
    get_last_item_id,
    list_category_items,
    lookup_barcode,
    update_item_price,
)

router = APIRouter(prefix="/items", tags=["Items"])


@router.post("", response_model=ItemRead, status_code=201)
def post_item(payload: ItemCreate, db: Session = Depends(get_db)):
    return create_item(
        db,
        user_id=payload.user_id,
        name=payload.name,
        barcode=payload.barcode,
        category_id=payload.category_id,
        price=payload.price,
    )


@router.post("/details", response_model=ItemDetailsRead, status_code=201)
def post_item_details(payload: ItemDetailsCreate, db: Session = Depends(get_db)):
    return create_item_details(
        db,
        item_id=payload.item_id,
        package_type=payload.package_type,
        measure=payload.measure,
        package_weight=payload.package_weight,
        storage_location=payload.storage_location,
        stock_on_hand=payload.stock_on_hand,
    )


@router.get("/category/{category_id}", response_model=List[ItemWithDetails])
def category_items(
    category_id: int,
    user_id: int = Query(None, alias="userId"),
    db: Session = Depends(get_db),
):
    return list_category_items(db, user_id=user_id, category_id=category_id)


@router.get("/last-id")
def last_item_id(db: Session = Depends(get_db)):
    return {"lastid": get_last_item_id(db)}


@router.post("/barcode", response_model=ItemWithDetails)
def barcode_details(payload: BarcodeLookup, db: Session = Depends(get_db)):
    return lookup_barcode(db, user_id=payload.user_id, barcode=payload.barcode)


@router.get("/{user_id}/{item_id}")
def item_details(user_id: int, item_id: int, db: Session = Depends(get_db)):
    item = get_item_details(db, user_id=user_id, item_id=item_id)
    return {"item": ItemWithDetails.model_validate(item)}


@router.put("/{item_id}/price")
def put_item_price(item_id: int, payload: ItemPriceUpdate, db: Session = Depends(get_db)):
    item = update_item_price(db, item_id=item_id, price=payload.price)
    return {
        "success": True,
        "message": "Price updated successfully",
        "itemId": item.id,
        "newPrice": float(item.price),
    }


@router.delete("/{item_id}/{user_id}")
def remove_item(item_id: int, user_id: int, db: Session = Depends(get_db)):
    delete_item(db, item_id=item_id, user_id=user_id)
    return {"message": "Item and all related data deleted successfully"}
