from fastapi import APIRouter, Depends, HTTPException, Request, status

from athletics.schemas.notification import NotificationTriggerResponse, SchedulerStatusResponse
from athletics.services.scheduler import NotificationScheduler

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


def get_scheduler(request: Request) -> NotificationScheduler:
    """Scheduler owned by the app lifespan"""
    scheduler = getattr(request.app.state, "notification_scheduler", None)
    if scheduler is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification scheduler not started",
        )
    return scheduler


@router.post("/trigger", response_model=NotificationTriggerResponse)
async def trigger_notifications(
    scheduler: NotificationScheduler = Depends(get_scheduler),
):
    """
    Run a reminder pass now.

    Not subject to quiet hours so an administrator can always force a send.
    Already-delivered reminders are skipped, so this is safe to repeat.
    """
    try:
        result = await scheduler.trigger_manual()
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to trigger notification check: {e}",
        )

    return NotificationTriggerResponse(
        success=True,
        message=(
            f"Notification check complete: {result.delivered} reminders sent, "
            f"{result.duplicates_skipped} duplicates skipped"
        ),
        **result.model_dump(),
    )


@router.get("/scheduler", response_model=SchedulerStatusResponse)
async def scheduler_status(
    scheduler: NotificationScheduler = Depends(get_scheduler),
):
    """Whether the hourly job is running and currently muted"""
    return SchedulerStatusResponse(
        running=scheduler.running,
        quiet_hours=scheduler.in_quiet_hours(),
        run_minute=scheduler.run_minute,
        timezone=scheduler.tz.key,
    )
