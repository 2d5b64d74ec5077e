"""Customer event mutation router."""
import logging
from typing import Callable, Union

from fastapi import APIRouter, BackgroundTasks, Depends

from occasions.dependencies import (
    get_ledger_service,
    get_metaobject_service,
    get_reward_config,
    get_reward_loader,
)
from occasions.exceptions import ValidationError
from occasions.schemas import (
    ChangeEventRequest,
    DeleteEventRequest,
    DeleteEventResponse,
    EventRequest,
    RewardConfig,
    SaveEventResponse,
)
from occasions.services import LedgerService, MetaobjectService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/create-metaobject", response_model=SaveEventResponse)
def create_metaobject(
    request: EventRequest,
    background_tasks: BackgroundTasks,
    service: MetaobjectService = Depends(get_metaobject_service),
    ledger: LedgerService = Depends(get_ledger_service),
    reward: RewardConfig = Depends(get_reward_config),
):
    """
    Create a customer event, or update it when the body carries an id.

    The customer's occasion list, count and reward metafields are reconciled
    after the response is prepared; failures there are only logged.
    """
    record = service.save_event(request)
    if request.id:
        background_tasks.add_task(ledger.reconcile_update, request.customer, reward)
        message = "Metaobject updated successfully"
    else:
        background_tasks.add_task(ledger.reconcile_create, request.customer, record.id, reward)
        message = "Metaobject created successfully"
    return SaveEventResponse(metaobject=record, message=message)


@router.post(
    "/change-metaobject",
    response_model=Union[SaveEventResponse, DeleteEventResponse],
)
def change_metaobject(
    request: ChangeEventRequest,
    background_tasks: BackgroundTasks,
    service: MetaobjectService = Depends(get_metaobject_service),
    ledger: LedgerService = Depends(get_ledger_service),
    load_reward: Callable[[], RewardConfig] = Depends(get_reward_loader),
):
    """
    Update or delete an existing event, selected by `operation`.

    Reward headers are only read on update; a delete never grants a reward.
    """
    if request.operation not in ("update", "delete"):
        raise ValidationError("Operation must be 'update' or 'delete'")

    if request.operation == "delete":
        deleted_id = service.delete_event(DeleteEventRequest(id=request.id, customer=request.customer))
        background_tasks.add_task(ledger.reconcile_delete, request.customer, deleted_id)
        return DeleteEventResponse(deletedId=deleted_id)

    reward = load_reward()
    record = service.update_event(request)
    background_tasks.add_task(ledger.reconcile_update, request.customer, reward)
    return SaveEventResponse(metaobject=record, message="Metaobject updated successfully")


@router.post("/delete-metaobject", response_model=DeleteEventResponse)
def delete_metaobject(
    request: DeleteEventRequest,
    background_tasks: BackgroundTasks,
    service: MetaobjectService = Depends(get_metaobject_service),
    ledger: LedgerService = Depends(get_ledger_service),
):
    """Delete an event and lower the customer's cached occasion count."""
    deleted_id = service.delete_event(request)
    background_tasks.add_task(ledger.reconcile_delete, request.customer, deleted_id)
    return DeleteEventResponse(deletedId=deleted_id)
