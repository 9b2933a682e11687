"""
JobTrack - Main FastAPI Application
Job application pipeline tracking with dashboard stats
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
import logging

from .config import settings
from .models.application import JobApplicationCreate, JobApplicationUpdate
from .models.status import ApplicationStatus
from .services.dashboard_service import DashboardService
from .services.priority import rank_applications
from .services.staleness import sweep_stale_applications
from .services.stats import aggregate_stats, summary_cards
from .services.store import ApplicationStore, ApplicationStoreError, InMemoryApplicationStore

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="JobTrack",
    description="Job application pipeline tracker",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache
def get_store() -> ApplicationStore:
    """Application store selected by STORE_BACKEND"""
    if settings.store_backend == "supabase":
        from .services.supabase_service import SupabaseApplicationStore
        return SupabaseApplicationStore(settings)
    logger.info("Using in-memory application store")
    return InMemoryApplicationStore()


def get_dashboard_service(store: ApplicationStore = Depends(get_store)) -> DashboardService:
    return DashboardService(store, stale_after_days=settings.stale_after_days)


# Health check endpoint
@app.get("/")
async def root():
    return {"message": "JobTrack is running!", "status": "healthy"}

@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "JobTrack"}


# Dashboard endpoint
@app.get("/dashboard")
async def get_dashboard(
    user_id: str,
    search: Optional[str] = None,
    status: Optional[ApplicationStatus] = None,
    service: DashboardService = Depends(get_dashboard_service),
):
    """Auto-reject stale applications, then return ranked applications and stats"""
    try:
        return await service.load(user_id, search=search, status=status)
    except ApplicationStoreError as e:
        logger.error(f"Error loading dashboard: {str(e)}")
        raise HTTPException(status_code=503, detail="Failed to load job applications")


# Applications endpoints
@app.get("/applications")
async def get_applications(
    user_id: str,
    status: Optional[ApplicationStatus] = None,
    company: Optional[str] = None,
    position: Optional[str] = None,
    store: ApplicationStore = Depends(get_store),
):
    """Get a user's applications, most urgent first"""
    try:
        applications = await store.list_applications(user_id, status=status, company=company, position=position)
    except ApplicationStoreError as e:
        logger.error(f"Error retrieving applications: {str(e)}")
        raise HTTPException(status_code=503, detail="Failed to load job applications")
    return {"job_applications": rank_applications(applications), "count": len(applications)}

@app.post("/applications", status_code=201)
async def create_application(
    application: JobApplicationCreate,
    user_id: str,
    store: ApplicationStore = Depends(get_store),
):
    """Create a new application entry"""
    try:
        created = await store.create_application(user_id, application)
    except ApplicationStoreError as e:
        logger.error(f"Error creating application: {str(e)}")
        raise HTTPException(status_code=503, detail="Failed to create job application")
    return {"message": "Job application created successfully", "job_application": created}

@app.get("/applications/stats")
async def get_application_stats(user_id: str, store: ApplicationStore = Depends(get_store)):
    """Get per-status counts and percentages for a user"""
    try:
        applications = await store.list_applications(user_id)
    except ApplicationStoreError as e:
        logger.error(f"Error retrieving application stats: {str(e)}")
        raise HTTPException(status_code=503, detail="Failed to load statistics")
    stats = aggregate_stats(applications)
    return {"stats": stats, "cards": summary_cards(stats)}

@app.post("/applications/auto-reject")
async def auto_reject_applications(user_id: str, store: ApplicationStore = Depends(get_store)):
    """Reject applications left in 'applied' past the staleness window"""
    try:
        result = await sweep_stale_applications(store, user_id, stale_after_days=settings.stale_after_days)
    except ApplicationStoreError as e:
        logger.error(f"Error auto-rejecting applications: {str(e)}")
        raise HTTPException(status_code=503, detail="Failed to auto-reject applications")
    return {
        "message": f"{result.rejected_count} applications auto-rejected",
        "rejected_ids": result.rejected_ids,
        "failed_ids": result.failed_ids,
        "skipped_ids": result.skipped_ids,
    }

@app.get("/applications/{application_id}")
async def get_application(application_id: str, user_id: str, store: ApplicationStore = Depends(get_store)):
    """Get a specific application by ID"""
    try:
        application = await store.get_application(application_id, user_id)
    except ApplicationStoreError as e:
        logger.error(f"Error retrieving application: {str(e)}")
        raise HTTPException(status_code=503, detail="Failed to load job application")
    if application is None:
        raise HTTPException(status_code=404, detail="Job application not found")
    return {"job_application": application}

@app.put("/applications/{application_id}")
async def update_application(
    application_id: str,
    update: JobApplicationUpdate,
    user_id: str,
    store: ApplicationStore = Depends(get_store),
):
    """Update an application"""
    try:
        application = await store.update_application(application_id, user_id, update)
    except ApplicationStoreError as e:
        logger.error(f"Error updating application: {str(e)}")
        raise HTTPException(status_code=503, detail="Failed to update job application")
    if application is None:
        raise HTTPException(status_code=404, detail="Job application not found")
    return {"message": "Job application updated successfully", "job_application": application}

@app.delete("/applications/{application_id}")
async def delete_application(application_id: str, user_id: str, store: ApplicationStore = Depends(get_store)):
    """Delete an application"""
    try:
        deleted = await store.delete_application(application_id, user_id)
    except ApplicationStoreError as e:
        logger.error(f"Error deleting application: {str(e)}")
        raise HTTPException(status_code=503, detail="Failed to delete job application")
    if not deleted:
        raise HTTPException(status_code=404, detail="Job application not found")
    return {"message": "Job application deleted successfully"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
