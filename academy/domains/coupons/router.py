from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from academy.core.deps import get_db, require_admin
from academy.core.security import Principal
from academy.domains.coupons.models import CouponCode
from academy.domains.coupons.schemas import CouponIn, CouponListOut, CouponOut, CouponUpdateIn, CouponValidationOut
from academy.domains.coupons.service import (
    calculate_discount,
    create_coupon,
    final_price,
    list_coupons,
    update_coupon,
    validate_coupon,
)
from academy.domains.courses.service import get_course


router = APIRouter()


def coupon_out(c: CouponCode) -> CouponOut:
    return CouponOut(
        id=c.id,
        code=c.code,
        discount_type=c.discount_type,
        discount_value=c.discount_value,
        max_uses=c.max_uses,
        current_uses=c.current_uses,
        valid_from=c.valid_from,
        valid_until=c.valid_until,
        is_active=c.is_active,
        applicable_courses=c.applicable_courses or [],
    )


@router.get("/coupons/validate", response_model=CouponValidationOut)
def validate(
    code: str = Query(min_length=1),
    course_id: str = Query(min_length=1),
    db: Session = Depends(get_db),
) -> CouponValidationOut:
    course = get_course(db, course_id)
    coupon = validate_coupon(db, code, course_id)
    discount = calculate_discount(coupon, course.price)
    return CouponValidationOut(
        coupon=coupon_out(coupon),
        original_price=course.price,
        discount_amount=discount,
        final_price=final_price(course.price, discount),
    )


@router.get("/admin/coupons", response_model=CouponListOut)
def admin_list_coupons(
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> CouponListOut:
    return CouponListOut(coupons=[coupon_out(c) for c in list_coupons(db)])


@router.post("/admin/coupons", response_model=CouponOut, status_code=status.HTTP_201_CREATED)
def admin_create_coupon(
    payload: CouponIn,
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> CouponOut:
    return coupon_out(create_coupon(db, payload))


@router.patch("/admin/coupons/{coupon_id}", response_model=CouponOut)
def admin_update_coupon(
    coupon_id: str,
    payload: CouponUpdateIn,
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> CouponOut:
    return coupon_out(update_coupon(db, coupon_id, payload))
