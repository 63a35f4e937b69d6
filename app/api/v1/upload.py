import logging

from fastapi import APIRouter, Depends, File, Request, UploadFile
from starlette.concurrency import run_in_threadpool

from app.api.deps import get_current_user_id, get_settings
from app.core.config import Settings
from app.core.rate_limit import rate_limit
from app.parsing.extract import extract_text
from app.parsing.upload import staged_upload

router = APIRouter()
logger = logging.getLogger(__name__)


async def _extract_upload(upload: UploadFile | None, settings: Settings, *, user_id: str) -> dict:
    async with staged_upload(upload, settings) as staged:
        extracted = await run_in_threadpool(extract_text, staged.path, staged.content_type)

    logger.info(
        "upload_processed user_id=%s file_type=%s size=%s parser=%s",
        user_id,
        extracted.source_type,
        staged.size,
        extracted.parser,
    )
    return {
        "success": True,
        "text": extracted.text,
        "fileName": staged.file_name,
        "fileType": extracted.source_type,
        "fileSize": staged.size,
        "warnings": extracted.warnings,
    }


@router.post("/upload")
@rate_limit()
async def upload_resume(
    request: Request,
    resume: UploadFile | None = File(default=None),
    user_id: str = Depends(get_current_user_id),
    settings: Settings = Depends(get_settings),
):
    _ = request
    return await _extract_upload(resume, settings, user_id=user_id)


@router.post("/upload/resume")
@rate_limit()
async def upload_resume_file(
    request: Request,
    resume: UploadFile | None = File(default=None),
    user_id: str = Depends(get_current_user_id),
    settings: Settings = Depends(get_settings),
):
    _ = request
    body = await _extract_upload(resume, settings, user_id=user_id)
    return {"message": "File processed successfully", **body}


@router.post("/upload/job-description")
@rate_limit()
async def upload_job_description(
    request: Request,
    job_description: UploadFile | None = File(default=None, alias="jobDescription"),
    user_id: str = Depends(get_current_user_id),
    settings: Settings = Depends(get_settings),
):
    _ = request
    body = await _extract_upload(job_description, settings, user_id=user_id)
    return {"message": "Job description processed successfully", **body}
