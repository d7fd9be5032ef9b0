"""News, source and pipeline log routes for the REST API."""
from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends, Query, status
import redis.asyncio as redis
from motor.motor_asyncio import AsyncIOMotorDatabase

from database.connection import get_db, get_redis
from database.events import ChangePublisher
from database.repositories.article_repo import ArticleRepository
from database.repositories.log_repo import PipelineLogRepository
from database.repositories.source_repo import SourceRepository
from api.models import NewsArticleModel, NewsSourceModel, PipelineLogModel
from api.schemas.requests import ArticleStatusUpdateRequest, SourceCreateRequest, SourceUpdateRequest
from api.schemas.responses import OperationResponse, ViewCountResponse


router = APIRouter(prefix="/news", tags=["news"])


@router.get("", response_model=List[NewsArticleModel], response_model_by_alias=False)
async def list_news(
    tag: Optional[str] = None,
    limit: int = Query(default=20, ge=1, le=100),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """List published articles, newest first, optionally filtered by tag."""
    article_repo = ArticleRepository(db)
    articles = await article_repo.list_published(tag=tag, limit=limit)
    return [NewsArticleModel(**article) for article in articles]


@router.get("/featured", response_model=Optional[NewsArticleModel], response_model_by_alias=False)
async def get_featured(db: AsyncIOMotorDatabase = Depends(get_db)):
    """Get the newest featured article, or null."""
    article_repo = ArticleRepository(db)
    article = await article_repo.get_featured()
    return NewsArticleModel(**article) if article else None


@router.post("/{article_id}/view", response_model=ViewCountResponse)
async def record_view(
    article_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Increment an article's view count."""
    article_repo = ArticleRepository(db)

    counted = await article_repo.increment_view_count(article_id)

    if not counted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Article {article_id} not found"
        )

    return ViewCountResponse(article_id=article_id, counted=True)


@router.post("/{article_id}/status", response_model=OperationResponse)
async def update_article_status(
    article_id: str,
    request: ArticleStatusUpdateRequest,
    db: AsyncIOMotorDatabase = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis)
):
    """Record the summarizer's outcome for an article. Status only moves forward."""
    article_repo = ArticleRepository(db, ChangePublisher(redis_client))

    try:
        moved = await article_repo.update_article_status(article_id, request.status.value, summary=request.summary)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not moved:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Article {article_id} not found or cannot move to {request.status.value}"
        )

    return OperationResponse(success=True, message=f"Article {article_id} is now {request.status.value}")


@router.get("/logs", response_model=List[PipelineLogModel], response_model_by_alias=False)
async def list_logs(
    operation: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=500),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """List pipeline log entries, newest first."""
    log_repo = PipelineLogRepository(db)
    entries = await log_repo.list_logs(operation=operation, limit=limit)
    return [PipelineLogModel(**entry) for entry in entries]


@router.get("/sources", response_model=List[NewsSourceModel], response_model_by_alias=False)
async def list_sources(db: AsyncIOMotorDatabase = Depends(get_db)):
    """List all sources ordered by name."""
    source_repo = SourceRepository(db)
    sources = await source_repo.list_sources()
    return [NewsSourceModel(**source) for source in sources]


@router.post(
    "/sources",
    response_model=NewsSourceModel,
    response_model_by_alias=False,
    status_code=status.HTTP_201_CREATED
)
async def create_source(
    request: SourceCreateRequest,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Register a new news source."""
    source_repo = SourceRepository(db)

    if await source_repo.get_source_by_url(request.url):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Source with URL {request.url} already exists"
        )

    source = await source_repo.create_source(
        name=request.name,
        url=request.url,
        source_type=request.source_type.value,
        is_active=request.is_active,
        fetch_interval=request.fetch_interval
    )
    return NewsSourceModel(**source)


@router.patch("/sources/{source_id}", response_model=NewsSourceModel, response_model_by_alias=False)
async def update_source(
    source_id: str,
    request: SourceUpdateRequest,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Activate, deactivate, rename or repoint a source."""
    source_repo = SourceRepository(db)

    updates = request.model_dump(exclude_none=True)
    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update"
        )

    source = await source_repo.update_source(source_id, updates)

    if not source:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Source {source_id} not found"
        )

    return NewsSourceModel(**source)
