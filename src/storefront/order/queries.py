"""Read side of orders: the caller's order history."""

import math

from protean.utils.globals import current_domain

from storefront.order.order import Order


def order_summary(order: Order) -> dict:
    payment = order.payment_info
    return {
        "id": str(order.id),
        "orderNumber": order.order_number,
        "orderStatus": order.order_status,
        "paymentStatus": order.payment_status,
        "totalAmount": order.total_amount,
        "itemsTotal": order.items_total,
        "shippingInfo": str(order.shipping_info) if order.shipping_info else None,
        "paymentInfo": {
            "amountPaid": payment.amount_paid,
            "typePayment": payment.type_payment,
            "paymentAccountName": payment.account_name,
        }
        if payment
        else None,
        "orderItems": [
            {
                "product": str(item.product_id),
                "name": item.name,
                "quantity": item.quantity,
                "image": item.image,
                "price": item.price,
                "category": item.category,
            }
            for item in order.items
        ],
        "createdAt": order.created_at.isoformat() if order.created_at else None,
    }


def my_orders(user_id: str, page: int, page_size: int) -> dict:
    """Orders of ``user_id``, newest first, ``page_size`` per page."""
    page = max(page, 1)
    result = (
        current_domain.repository_for(Order)
        ._dao.query.filter(user_id=user_id)
        .order_by("-created_at")
        .limit(page_size)
        .offset((page - 1) * page_size)
        .all()
    )
    return {
        "orders": [order_summary(order) for order in result.items],
        "ordersCount": result.total,
        "totalPages": math.ceil(result.total / page_size) if page_size else 0,
    }
