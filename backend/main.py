"""
ReportCard Engine — term report computation for school dashboards.
FastAPI backend entry point.
"""

import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment before route modules read their settings
load_dotenv()

from core.app_logger import setup_logging  # noqa: E402
from core.grading import get_all_grade_thresholds  # noqa: E402
from core.report_builder import DEFAULT_HEAD_TEACHER_REMARK  # noqa: E402
from routes.analyze import router as analyze_router  # noqa: E402
from routes.reports import router as reports_router  # noqa: E402

logger = setup_logging()

SCHOOL_NAME = os.getenv("SCHOOL_NAME", "My School")
HEAD_TEACHER_REMARK = os.getenv("DEFAULT_HEAD_TEACHER_REMARK", DEFAULT_HEAD_TEACHER_REMARK)
# Comma-separated allowed origins, e.g. http://localhost:5173,https://app.example.com
raw_origins = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000")
ALLOWED_ORIGINS = [o.strip() for o in raw_origins.split(",") if o.strip()]

app = FastAPI(
    title="ReportCard Engine API",
    description=(
        "Grades, class positions, attendance and report card snapshots "
        "computed from gradebook and attendance records."
    ),
    version="1.0.0",
)

# CORS — allow the dashboard dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register route modules
app.include_router(analyze_router, prefix="/api/analyze", tags=["Analytics"])
app.include_router(reports_router, prefix="/api/reports", tags=["Reports"])

logger.info("ReportCard Engine started for %s", SCHOOL_NAME)


@app.get("/api/health")
async def health_check():
    return {
        "status": "ok",
        "school_name": SCHOOL_NAME,
    }


@app.get("/api/config")
async def get_config():
    """Return server configuration to the frontend."""
    return {
        "school_name": SCHOOL_NAME,
        "default_head_teacher_remark": HEAD_TEACHER_REMARK,
        "grade_scale": get_all_grade_thresholds(),
    }
