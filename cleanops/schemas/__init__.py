from cleanops.schemas.auth import LoginRequest, Token, WorkerRegister
from cleanops.schemas.hostaway import ListingDTO, ReservationDTO
from cleanops.schemas.task import (
    ChecklistItemResponse,
    TaskResponse,
    TaskDetailResponse,
    TaskHistoryResponse,
    AssignTaskRequest,
    CompleteTaskRequest,
    CancelTaskRequest,
    ChecklistItemUpdate,
)
from cleanops.schemas.booking import BookingResponse
from cleanops.schemas.account import AccountResponse, AccountSyncResultResponse, SyncBatchResponse
from cleanops.schemas.worker import WorkerResponse
from cleanops.schemas.notification import NotificationResponse
from cleanops.schemas.analytics import OverviewResponse
