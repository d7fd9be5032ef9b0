"""Automation routes for the REST API."""
from dataclasses import asdict
from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
import redis.asyncio as redis

from database.connection import get_db, get_redis
from pipeline.automation import AutomationController
from api.schemas.responses import (
    OperationResponse,
    AutomationStatusResponse,
    HealthResponse,
    DiagnosticsResponse
)


router = APIRouter(prefix="/automation", tags=["automation"])


async def get_automation_controller(
    db: AsyncIOMotorDatabase = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis)
) -> AutomationController:
    """Dependency for getting an automation controller."""
    return AutomationController(db, redis_client)


@router.post("/initialize", response_model=OperationResponse)
async def initialize(controller: AutomationController = Depends(get_automation_controller)):
    """
    Initialize the automation.

    - Registers the default sources when none are active
    - Runs a first fetch and schedules summaries on an empty system
    """
    result = await controller.initialize()
    return OperationResponse(**asdict(result))


@router.get("/status", response_model=AutomationStatusResponse)
async def get_status(controller: AutomationController = Depends(get_automation_controller)):
    """Get last fetch/summary times, queue size and system health."""
    status_info = await controller.get_status()
    return AutomationStatusResponse(**asdict(status_info))


@router.post("/fetch", response_model=OperationResponse)
async def trigger_fetch(controller: AutomationController = Depends(get_automation_controller)):
    """Run a fetch cycle now."""
    result = await controller.trigger_manual_fetch()
    return OperationResponse(**asdict(result))


@router.post("/summaries", response_model=OperationResponse)
async def trigger_summaries(controller: AutomationController = Depends(get_automation_controller)):
    """Ask the summarizer to process pending articles now."""
    result = await controller.trigger_manual_summary_processing()
    return OperationResponse(**asdict(result))


@router.post("/cleanup", response_model=OperationResponse)
async def cleanup(controller: AutomationController = Depends(get_automation_controller)):
    """Apply the retention rules."""
    result = await controller.perform_cleanup()
    return OperationResponse(**asdict(result))


@router.get("/health", response_model=HealthResponse)
async def check_health(controller: AutomationController = Depends(get_automation_controller)):
    """Check storage, sources and the recent error rate."""
    report = await controller.check_system_health()
    return HealthResponse(**asdict(report))


@router.get("/diagnostics", response_model=DiagnosticsResponse)
async def diagnostics(controller: AutomationController = Depends(get_automation_controller)):
    """Check configuration, collections, summarizer setup and data presence."""
    report = await controller.diagnose()
    return DiagnosticsResponse(**asdict(report))


@router.post("/reset", response_model=OperationResponse)
async def reset(controller: AutomationController = Depends(get_automation_controller)):
    """Remove corrupted articles and reseed the default sources."""
    result = await controller.reset_system()
    return OperationResponse(**asdict(result))
