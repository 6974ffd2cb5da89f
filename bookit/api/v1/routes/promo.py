from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from bookit.db.session import get_db
from bookit.core.errors import PromoNotFoundError
from bookit.schemas.promo import PromoValidateIn, PromoValidateOut
from bookit.services.promo_service import validate_promo

router = APIRouter(tags=["promo"])


@router.post("/promo/validate", response_model=PromoValidateOut)
def validate_promo_code(body: PromoValidateIn, db: Session = Depends(get_db)):
    """Explicitly reports unknown or inactive codes, unlike booking which ignores them."""
    try:
        result = validate_promo(db, body.code, body.amount)
    except PromoNotFoundError as e:
        return JSONResponse(status_code=e.status_code, content={"valid": False, "error": e.message})
    return PromoValidateOut(
        valid=result.valid,
        code=result.code,
        discountType=result.discount_type,
        discountValue=float(result.discount_value),
        discountAmount=result.discount_amount,
    )
