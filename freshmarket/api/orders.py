from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, status

from freshmarket.api.dependencies import get_order_service
from freshmarket.schemas.envelope import Envelope, success
from freshmarket.schemas.order import Order as OrderSchema, OrderCreate, OrderUpdate
from freshmarket.schemas.pagination import PageMeta, PageParams, page_params
from freshmarket.services.notifications import OrderMailer, get_mailer
from freshmarket.services.orders import OrderService

router = APIRouter()


@router.post("", response_model=Envelope[OrderSchema], status_code=status.HTTP_201_CREATED)
def create_order(
    order: OrderCreate,
    background_tasks: BackgroundTasks,
    service: OrderService = Depends(get_order_service),
    mailer: OrderMailer = Depends(get_mailer),
):
    db_order = service.create(order)
    # runs after the response is sent; failures are logged by the mailer
    background_tasks.add_task(
        mailer.send_order_confirmation,
        order_id=db_order.id,
        client_name=db_order.client_name,
        email=db_order.email,
        status=db_order.status,
    )
    return success(OrderSchema.model_validate(db_order), message="Order created successfully", status_code=201)


@router.get("", response_model=Envelope[List[OrderSchema]])
def read_orders(
    params: PageParams = Depends(page_params),
    service: OrderService = Depends(get_order_service),
):
    orders = service.get_all(params)
    return success(
        [OrderSchema.model_validate(o) for o in orders],
        message="Orders fetched successfully",
        pagination=PageMeta.build(params, service.count()),
    )


@router.get("/{order_id}", response_model=Envelope[OrderSchema])
def read_order(order_id: str, service: OrderService = Depends(get_order_service)):
    return success(OrderSchema.model_validate(service.get_by_id(order_id)), message="Order fetched successfully")


@router.put("/{order_id}", response_model=Envelope[OrderSchema])
def update_order(
    order_id: str,
    order: OrderUpdate,
    service: OrderService = Depends(get_order_service),
):
    db_order = service.update(order_id, order)
    return success(OrderSchema.model_validate(db_order), message="Order updated successfully")


@router.delete("/{order_id}", response_model=Envelope[OrderSchema])
def delete_order(order_id: str, service: OrderService = Depends(get_order_service)):
    db_order = service.soft_delete(order_id)
    return success(OrderSchema.model_validate(db_order), message="Order deleted successfully")


@router.delete("/{order_id}/permanent", response_model=Envelope)
def permanently_delete_order(order_id: str, service: OrderService = Depends(get_order_service)):
    service.hard_delete(order_id)
    return success(None, message="Order permanently deleted successfully")
